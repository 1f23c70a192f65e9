# Overview: Flask extension instances and accessors for the per-app repository container and blob storage.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

REPOSITORIES_KEY = "shopicano.repositories"
STORAGE_KEY = "shopicano.storage"


def get_repositories():
    """Repository container built by create_app() for the current app."""
    return current_app.extensions[REPOSITORIES_KEY]


def get_storage():
    return current_app.extensions[STORAGE_KEY]
