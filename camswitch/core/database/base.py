# File: camswitch/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. All feature models (Session, Camera, Rule, Event) inherit from this.
Base = declarative_base()
