from pydantic import BaseModel
from typing import Optional


class MecCsvRow(BaseModel):
    """One source line mapped onto canonical column names. Missing columns are empty strings."""
    CO_IES: str = ""
    NO_IES: str = ""
    SG_IES: str = ""
    TP_ORGANIZACAO: str = ""
    TP_CATEGORIA: str = ""
    CO_MUNICIPIO_IES: str = ""
    NO_MUNICIPIO_IES: str = ""
    SG_UF_IES: str = ""
    CO_CURSO: str = ""
    NO_CURSO: str = ""
    TP_GRAU: str = ""
    TP_MODALIDADE: str = ""
    NO_CINE_AREA_GERAL: str = ""
    QT_CARGA_HORARIA: str = ""
    CO_SITUACAO: str = ""


class NormalizedInstitution(BaseModel):
    codigo_ies: int
    nome: str
    sigla: Optional[str] = None
    organizacao: Optional[str] = None
    categoria: Optional[str] = None
    uf: str
    municipio: Optional[str] = None
    codigo_municipio: Optional[int] = None


class NormalizedCourse(BaseModel):
    codigo_curso: int
    codigo_ies: int
    nome: str
    grau: Optional[str] = None
    modalidade: Optional[str] = None
    area_conhecimento: Optional[str] = None
    carga_horaria: Optional[int] = None
    situacao: Optional[str] = None


# ========== Read-side responses ==========

class InstitutionResponse(BaseModel):
    id: int
    codigo_ies: int
    nome: str
    sigla: Optional[str] = None
    uf: str
    municipio: Optional[str] = None
    categoria: Optional[str] = None
    organizacao: Optional[str] = None

    class Config:
        from_attributes = True


class CourseInstitutionSummary(BaseModel):
    nome: str
    sigla: Optional[str] = None
    uf: str


class CourseResponse(BaseModel):
    id: int
    codigo_curso: int
    nome: str
    grau: Optional[str] = None
    modalidade: Optional[str] = None
    area_conhecimento: Optional[str] = None
    institution: CourseInstitutionSummary


class MecStats(BaseModel):
    total_institutions: int
    total_courses: int
    institutions_by_uf: dict[str, int]
