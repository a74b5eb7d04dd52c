# auth/local/models.py
from sqlalchemy import Column, Integer, String, ForeignKey
from utils.db_utils import Base

class Usuario(Base):
    __tablename__ = "usuarios"
    id = Column(Integer, primary_key=True)
    email = Column(String(100), unique=True, nullable=False)
    senha = Column(String(255), nullable=False)  # bcrypt hash
    funcionario_id = Column(Integer, ForeignKey("funcionarios.id"), nullable=True)
