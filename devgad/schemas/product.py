from pydantic import BaseModel


class Product(BaseModel):
    id: str
    name: str
    name_marathi: str
    description: str
    description_marathi: str
    price: int
    weight: str

    class Config:
        frozen = True
