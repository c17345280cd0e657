from sqlalchemy.orm import declarative_base
from sqlalchemy import event
from core.id_generator import generate_object_id

# Shared Base for all models
Base = declarative_base()


@event.listens_for(Base, "before_insert", propagate=True)
def assign_object_id(mapper, connection, target):
    if getattr(target, "id", None) is None:
        target.id = generate_object_id()
