from dotenv import load_dotenv

load_dotenv()

from thebus.db import engine  # noqa: E402
from thebus.models import Base  # noqa: E402


def init_db():
    Base.metadata.create_all(bind=engine)
