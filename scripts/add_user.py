#!/usr/bin/env python3
"""Create a dashboard user from the command line."""
import argparse
import getpass

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from app.auth import get_password_hash
from app.config import get_settings
from app.database import Base
from app.models import User


def main():
    parser = argparse.ArgumentParser(description="Add a dashboard user")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--disabled", action="store_true", help="Create the account disabled")

    args = parser.parse_args()
    password = getpass.getpass("Password: ")

    settings = get_settings()
    engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        email = args.email.lower()
        if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
            print(f"User {email} already exists")
            return

        user = User(email=email, password_hash=get_password_hash(password), is_active=not args.disabled)
        session.add(user)
        session.commit()
        print(f"Created user {email} (id {user.id})")
    except Exception as e:
        session.rollback()
        print(f"Error: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
