# manage.py
import sys

from app import create_app
from melodix.database.db_manager import db


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables created at {app.config['SQLALCHEMY_DATABASE_URI']}")


def drop_db():
    """Drops every Melodix table; used to reset a development database."""
    app = create_app()
    with app.app_context():
        db.drop_all()
        print("Database tables dropped!")


COMMANDS = {
    'create_db': create_db,
    'drop_db': drop_db,
}


if __name__ == '__main__':
    if len(sys.argv) > 1 and sys.argv[1] in COMMANDS:
        COMMANDS[sys.argv[1]]()
    else:
        print(f"Usage: python manage.py [{'|'.join(COMMANDS)}]")
        sys.exit(1)
