"""
WSGI entry point — used by gunicorn in Procfile.
"""
from survey_tracker import create_app

app = create_app()

if __name__ == '__main__':
    from survey_tracker.config import PORT
    app.run(host='0.0.0.0', port=PORT)
