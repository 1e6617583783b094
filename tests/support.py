"""Test doubles and MEC dataset builders shared by unit and integration tests."""

INTERNAL_TOKEN = "test-internal-token"

MEC_HEADER = (
    "CODIGO_IES,NOME_IES,CATEGORIA_ADMINISTRATIVA,ORGANIZACAO_ACADEMICA,"
    "CODIGO_CURSO,NOME_CURSO,GRAU,AREA_OCDE_CINE,MODALIDADE,SITUACAO_CURSO,"
    "CODIGO_MUNICIPIO,MUNICIPIO,UF,CARGA_HORARIA"
)

MEC_ROWS = [
    '1,UNIVERSIDADE FEDERAL DE MATO GROSSO,1,1,101,DIREITO,1,DIREITO,1,1,5103403,CUIABA,MT,3700',
    '1,UNIVERSIDADE FEDERAL DE MATO GROSSO,1,1,102,MEDICINA,1,SAUDE E BEM-ESTAR,1,1,5103403,CUIABA,MT,7200',
    '2,"UNIVERSIDADE DE SAO PAULO, USP",2,1,201,ENGENHARIA DE COMPUTACAO,1,ENGENHARIA,1,1,3550308,SAO PAULO,SP,3600',
    '3,FACULDADE EXEMPLO,4,3,301,ADMINISTRACAO,1,NEGOCIOS,2,1,3304557,RIO DE JANEIRO,RJ,3000',
]


def build_mec_csv(rows=None, header=MEC_HEADER) -> bytes:
    lines = [header] + list(MEC_ROWS if rows is None else rows)
    return ("\n".join(lines) + "\n").encode("utf-8")


class StubFetcher:
    """PageFetcher returning a fixed payload (or raising) and counting calls."""

    def __init__(self, payload: bytes = b"", error: Exception = None):
        self.payload = payload
        self.error = error
        self.calls = 0

    async def fetch_rendered_page(self, url: str) -> bytes:
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


class StubAcquirer:
    """Stands in for DatasetAcquirer in orchestrator tests. `gate` holds the run until set."""

    def __init__(self, payload: bytes = b"", error: Exception = None, gate=None):
        self.payload = payload
        self.error = error
        self.gate = gate
        self.calls = 0

    async def acquire(self, url: str) -> bytes:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise self.error
        return self.payload
