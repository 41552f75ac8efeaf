# backend/wsgi.py
from tablecost import create_app

app = create_app()
