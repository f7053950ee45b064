#!/usr/bin/env python3
"""
Script to seed the database with sample data for local development
"""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import timedelta
from doublevision.database import init_db, drop_db, get_db
from doublevision.models import User, Photo
from doublevision.models.user import UserRole
from doublevision.utils.context import utcnow
from doublevision.utils.security import generate_token
import random


def create_users(db):
    """Create sample users"""

    # Create admin user
    admin = User(
        email='admin@doublevision.app',
        name='Admin User',
        role=UserRole.ADMIN
    )
    db.add(admin)

    # Create members
    members = []
    for i in range(10):
        member = User(
            email=f'member{i+1}@email.com',
            name=f'Member {i+1}',
            image=f'https://i.pravatar.cc/150?u=member{i+1}',
            role=UserRole.MEMBER,
            elo_rating=1000 + random.randint(-50, 50)
        )
        db.add(member)
        members.append(member)

    db.flush()

    return {
        'admin': admin,
        'members': members
    }


def create_photos(db, members):
    """Give each member one photo uploaded on a previous day"""
    now = utcnow()
    photo_count = 0
    for i, member in enumerate(members):
        uploaded = now - timedelta(days=1, hours=i)
        db.add(Photo(
            user_id=member.id,
            image_url=f'https://picsum.photos/seed/doublevision{i+1}/1200/800',
            upload_date=uploaded
        ))
        member.photo_count = 1
        member.last_upload = uploaded
        photo_count += 1

    print(f"Created {photo_count} photos")


def main():
    """Main seeding function"""
    print("Dropping existing database...")
    drop_db()

    print("Initializing new database...")
    init_db()

    # Use a single session for all operations
    with get_db() as db:
        print("Creating users...")
        users = create_users(db)

        print("Creating photos...")
        create_photos(db, users['members'])

        admin_token = generate_token({'user_id': users['admin'].id, 'role': 'admin'})
        member_token = generate_token({'user_id': users['members'][0].id, 'role': 'member'})

    print("\nDatabase seeded successfully!")
    print(f"Created:")
    print(f"- 1 Admin user (admin@doublevision.app)")
    print(f"- {len(users['members'])} Members, each with one photo awaiting reviews")

    print("\nDevelopment tokens:")
    print(f"- Admin:    Bearer {admin_token}")
    print(f"- Member 1: Bearer {member_token}")


if __name__ == "__main__":
    main()
