#!/usr/bin/env python3
"""
Management script for running CLI commands.

    python manage.py exports --init
    python manage.py exports --rebuild all
    python manage.py runserver --port 5000
"""

import sys

from app.interfaces.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
