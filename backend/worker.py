# backend/worker.py
# Run the reminder worker (from the backend directory):
#   celery -A worker.celery worker -Q reminders --loglevel=INFO
from repairshop import create_app

app = create_app()
celery = app.extensions["celery"]
