from app.core.config import get_settings
from app.core.db import Base, build_engine, init_db
from app.models import job, profile, user  # noqa: F401

# 한번만 실행하는 스크립트: python -m app.core.reset_db
def reset_db():
    engine = build_engine(get_settings().DATABASE_URL)
    print("데이터베이스 초기화 중...")
    Base.metadata.drop_all(bind=engine, checkfirst=True)
    init_db(engine)
    print("초기화 완료!")

if __name__ == "__main__":
    reset_db()
