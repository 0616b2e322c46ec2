"""
user_service tests

Covers the core backend logic of the user account service:

- FastAPI application and routes (`main.py`, `routes/`)
- SQLAlchemy models and the account store (`models.py`, `repository.py`)
- Password hashing and JWT logic (`auth.py`)
- Field validation and the identity workflow (`validator.py`, `service.py`)
"""
