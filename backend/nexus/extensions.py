# Overview: Flask extension instances for the record store database.

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
