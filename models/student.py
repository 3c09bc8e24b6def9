from pydantic import BaseModel, ConfigDict
from typing import Optional

class StudentBase(BaseModel):
    name: str
    canvas_account: Optional[str] = None

class StudentCreate(StudentBase):
    pass

class Student(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
