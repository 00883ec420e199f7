from app.core.database import Base, engine, session_scope
from app.modules.auth.models import User, UserRole, SubscriptionTier
# Mapped classes referenced by User relationships
from app.modules.keywords import models as keyword_models  # noqa: F401
from app.modules.tenders import models as tender_models  # noqa: F401
from app.modules.auth.services import get_password_hash
import secrets
import logging
import subprocess
import os
from app.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)

# Use Alembic to run migrations
def run_migrations():
    try:
        logger.info("Running database migrations with Alembic")
        project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
        subprocess.check_call(["alembic", "upgrade", "head"], cwd=project_root)
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Error running migrations: {str(e)}")
        raise

# Create all SQL tables without Alembic (local development only)
def create_tables(bind=None):
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("SQL tables created successfully")
    except Exception as e:
        logger.error(f"Error creating SQL tables: {str(e)}")
        raise

def create_initial_user(email=None, password=None, force_create=False, session_factory=None):
    """
    Create the initial account manager if there is none yet.

    Args:
        email (str, optional): Admin email, defaults to settings.ADMIN_EMAIL
        password (str, optional): Admin password, defaults to settings.ADMIN_PASSWORD
        force_create (bool): Create another admin even if one already exists
        session_factory: Session factory to use instead of SessionLocal

    Returns:
        bool: True if a user was created
    """
    admin_email = email or settings.ADMIN_EMAIL
    admin_password = password or settings.ADMIN_PASSWORD
    admin_role_value = UserRole.ACCOUNT_MANAGER.value

    with session_scope(session_factory) as db:
        try:
            user = db.query(User).filter(User.role == admin_role_value).first()
            if user and not force_create:
                logger.info(f"Admin user {user.email} already exists")
                return False

            if db.query(User).filter(User.email == admin_email).first():
                logger.warning(f"User {admin_email} already exists, use scripts/manage_admin.py to promote it")
                return False

            # Account managers get the paid features
            db.add(User(
                email=admin_email,
                password_hash=get_password_hash(admin_password),
                role=admin_role_value,
                subscription_tier=SubscriptionTier.PRO.value,
                subscription_status="ACTIVE"
            ))
            db.commit()
            logger.info(f"Admin user {admin_email} created successfully")
            return True
        except Exception as e:
            logger.error(f"Error creating admin user: {str(e)}")
            db.rollback()
            raise

def generate_secret_key():
    """Generate a secure random secret key"""
    return secrets.token_hex(32)

def init_all():
    """Migrate the database and create the initial admin user"""
    run_migrations()
    create_initial_user()
    logger.info("Database initialization completed")

if __name__ == "__main__":
    # Configure logging for script execution
    logging.basicConfig(level=logging.INFO)

    # Parse command line arguments for admin creation
    import argparse
    parser = argparse.ArgumentParser(description='Initialize database and create admin user')
    parser.add_argument('--email', help='Admin user email')
    parser.add_argument('--password', help='Admin user password')
    parser.add_argument('--force', action='store_true', help='Force creation even if admin exists')
    parser.add_argument('--skip-migrations', action='store_true', help='Create tables from the models instead of running migrations')
    parser.add_argument('--admin-only', action='store_true', help='Only create admin user')

    args = parser.parse_args()

    if args.admin_only:
        create_initial_user(args.email, args.password, args.force)
    elif args.skip_migrations:
        create_tables()
        create_initial_user(args.email, args.password, args.force)
    else:
        init_all()

    # Generate and print a secure secret key
    print("\nYou can use this secure secret key in your .env file:")
    print(f"SECRET_KEY={generate_secret_key()}")
