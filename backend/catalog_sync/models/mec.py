from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class MecInstitution(Base):
    """Higher-education institution (IES) from the MEC open dataset."""
    __tablename__ = "mec_institutions"

    id = Column(Integer, primary_key=True, index=True)
    codigo_ies = Column(Integer, unique=True, index=True, nullable=False)
    nome = Column(String(500), nullable=False)
    sigla = Column(String(50), nullable=True)
    organizacao = Column(String(100), nullable=True)
    categoria = Column(String(100), nullable=True)
    uf = Column(String(2), index=True, nullable=False)
    municipio = Column(String(255), nullable=True)
    codigo_municipio = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    courses = relationship("MecCourse", back_populates="institution")


class MecCourse(Base):
    """Undergraduate course offered by an institution."""
    __tablename__ = "mec_courses"

    id = Column(Integer, primary_key=True, index=True)
    codigo_curso = Column(Integer, unique=True, index=True, nullable=False)
    codigo_ies = Column(Integer, ForeignKey("mec_institutions.codigo_ies"), index=True, nullable=False)
    nome = Column(String(500), nullable=False)
    grau = Column(String(100), nullable=True)
    modalidade = Column(String(50), nullable=True)
    area_conhecimento = Column(String(255), nullable=True)
    carga_horaria = Column(Integer, nullable=True)
    situacao = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    institution = relationship("MecInstitution", back_populates="courses")
