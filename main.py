import os
import random
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI
from faker import Faker
from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime, Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from headless_datatables import DataTables, TableRequest, TableResult, number_rows

# ----------------------
# Database setup
# ----------------------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./students.db")

engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with async_session() as session:
        yield session


# ----------------------
# Models
# ----------------------
class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True)
    age = Column(Integer, nullable=False)
    enrolled_at = Column(DateTime, nullable=True)


class StudentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    counter: int = 0
    id: int
    first_name: str
    last_name: Optional[str] = None
    email: str
    age: int
    enrolled_at: Optional[datetime] = None


# ----------------------
# Create tables on startup
# ----------------------
@asynccontextmanager
async def lifespan(_: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(lifespan=lifespan)
faker = Faker()


# ----------------------
# Insert random students
# ----------------------
@app.get("/insert_students")
async def insert_students(count: int = 1000, db: AsyncSession = Depends(get_db)):
    students = [
        Student(
            first_name=faker.first_name(),
            last_name=faker.last_name(),
            email=faker.unique.email(),
            age=random.randint(18, 25),
            enrolled_at=faker.date_time_this_decade(),
        )
        for _ in range(count)
    ]
    db.add_all(students)
    await db.commit()
    return {"message": f"{count} random students inserted successfully!"}


# ----------------------
# DataTables endpoint
# ----------------------
@app.post("/students", response_model=TableResult[StudentSchema])
async def get_students(datatable_request: TableRequest, db: AsyncSession = Depends(get_db)):
    datatable = DataTables(db)
    result = await datatable.get_data(datatable_request, select(Student))
    rows = number_rows(result.rows, datatable_request, StudentSchema.model_validate)
    return result.model_copy(update={"rows": rows})
