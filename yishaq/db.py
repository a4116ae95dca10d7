from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from yishaq import config

Base = declarative_base()

# sqlite needs check_same_thread off for the threadpool FastAPI runs sync routes in
_connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
