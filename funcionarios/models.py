# funcionarios/models.py
from sqlalchemy import Column, Integer, String, ForeignKey
from utils.db_utils import Base

class Cargo(Base):
    __tablename__ = "cargos"
    id = Column(Integer, primary_key=True)
    nome = Column(String(100), nullable=False)

class Funcionario(Base):
    __tablename__ = "funcionarios"
    id = Column(Integer, primary_key=True)
    nome = Column(String(100), nullable=False)
    cargo_id = Column(Integer, ForeignKey("cargos.id"), nullable=True)
