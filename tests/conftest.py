import pytest

NFE_KEY = "35220312345678000195550010000000011234567890"
CTE_KEY = "35220312345678000195570010000000011234567890"


@pytest.fixture()
def nfe_xml() -> str:
    """Well-formed invoice with every extracted field present."""
    return f"""<?xml version="1.0"?>
<NFe>
    <infNFe Id="NFe{NFE_KEY}">
        <emit>
            <CNPJ>12345678000195</CNPJ>
            <xNome>Empresa Teste LTDA</xNome>
            <enderEmit>
                <UF>SP</UF>
            </enderEmit>
        </emit>
        <dest>
            <CNPJ>98765432000198</CNPJ>
            <xNome>Cliente Teste</xNome>
        </dest>
        <total>
            <ICMSTot>
                <vNF>1500.00</vNF>
            </ICMSTot>
        </total>
        <ide>
            <dhEmi>2023-03-15T10:30:00</dhEmi>
        </ide>
    </infNFe>
</NFe>"""


@pytest.fixture()
def cte_xml() -> str:
    """Well-formed transport waybill; the total sits inside a vPrest wrapper."""
    return f"""<?xml version="1.0"?>
<CTe>
    <infCte Id="CTe{CTE_KEY}">
        <emit>
            <CNPJ>12345678000195</CNPJ>
            <xNome>Transportadora Teste</xNome>
            <enderEmit>
                <UF>SP</UF>
            </enderEmit>
        </emit>
        <dest>
            <CNPJ>98765432000198</CNPJ>
            <xNome>Destinatário Teste</xNome>
        </dest>
        <vPrest>
            <vTPrest>350.00</vTPrest>
            <vRec>350.00</vRec>
        </vPrest>
        <ide>
            <dhEmi>2023-03-20T14:30:00</dhEmi>
        </ide>
    </infCte>
</CTe>"""


@pytest.fixture()
def nfse_xml() -> str:
    """Service invoice using the municipal provider/taker blocks."""
    return """<?xml version="1.0"?>
<CompNfse>
    <Nfse>
        <infNfse>
            <Numero>202300000000123</Numero>
            <DataEmissao>2023-04-01</DataEmissao>
            <PrestadorServico>
                <CNPJ>11222333000181</CNPJ>
                <RazaoSocial>Servicos Municipais SA</RazaoSocial>
                <UF>RJ</UF>
            </PrestadorServico>
            <TomadorServico>
                <CPF>12345678909</CPF>
                <RazaoSocial>Maria Tomadora</RazaoSocial>
            </TomadorServico>
            <ValorServicos>980.5</ValorServicos>
        </infNfse>
    </Nfse>
</CompNfse>"""


@pytest.fixture()
def unknown_xml() -> str:
    return """<?xml version="1.0"?>
<UnknownDocument>
    <Data>Test</Data>
</UnknownDocument>"""
