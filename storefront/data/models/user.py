from sqlalchemy import Column, String
from storefront.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
