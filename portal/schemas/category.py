from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""


class CategoryRead(BaseModel):
    id: int
    name: str
    description: str

    class Config:
        from_attributes = True
