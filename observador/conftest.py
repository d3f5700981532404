# conftest.py
"""
Shared fixtures: in-memory images, a mocked HTTP logo server, sample
student and observation records.
"""
from io import BytesIO

import httpx
import pytest
from PIL import Image

from observador.core.records import Student
from observador.pipeline.asset_loader import AssetLoader, LogoSet, decode_image

LOGO_BASE = 'https://colegio.example.edu.co/static'
LEFT_URL = f'{LOGO_BASE}/escudo.png'
RIGHT_URL = f'{LOGO_BASE}/colombia.jpg'


def make_image(size=(40, 40), color=(20, 80, 160), fmt='PNG', mode='RGB') -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image()


@pytest.fixture
def jpeg_bytes():
    return make_image(color=(200, 200, 40), fmt='JPEG')


@pytest.fixture
def logos(png_bytes, jpeg_bytes):
    return LogoSet(left=decode_image(LEFT_URL, png_bytes), right=decode_image(RIGHT_URL, jpeg_bytes))


@pytest.fixture
def logo_server(png_bytes, jpeg_bytes):
    """httpx.MockTransport serving both logos; anything else is 404."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        if str(request.url) == LEFT_URL:
            return httpx.Response(200, content=png_bytes, headers={'content-type': 'image/png'})
        if str(request.url) == RIGHT_URL:
            return httpx.Response(200, content=jpeg_bytes, headers={'content-type': 'image/jpeg'})
        return httpx.Response(404, text='not found')

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def mock_loader(logo_server):
    return AssetLoader(timeout=2.0, transport=logo_server)


@pytest.fixture
def http_cfg():
    """Configuration pointing both logos at the mocked server."""
    from observador.core.config import get_config
    return get_config(overrides=[f'assets.left_logo={LEFT_URL}', f'assets.right_logo={RIGHT_URL}'])


@pytest.fixture
def student_payload():
    return {
        'nombre': 'Ana  Pérez',
        'grado': '7B',
        'anio': 2024,
        'edad': 12,
        'diaNacimiento': 3,
        'mesNacimiento': 5,
        'anioNacimiento': 2012,
        'lugarNacimiento': 'Montería',
        'celular': '3001234567',
        'tipoDocumento': 'T.I.',
        'numeroDocumento': '1234567890',
        'rh': 'O+',
        'eps': 'Nueva EPS',
        'estadoMatricula': 'Antiguo',
        'direccion': 'Calle 5 # 10-20',
        'nombrePadre': 'Luis Pérez',
        'ocupacionPadre': 'Agricultor',
        'celularPadre': '3010000000',
        'nombreMadre': 'María Gómez',
        'ocupacionMadre': 'Docente',
        'celularMadre': '3020000000',
        'acudiente': 'María Gómez',
        'celularAcudiente': '3020000000',
    }


@pytest.fixture
def student(student_payload):
    return Student.from_mapping(student_payload)


@pytest.fixture
def observations():
    return {
        'I': {'fortalezas': 'Participa en clase\nTrabaja en equipo', 'dificultades': 'Llega tarde',
              'compromisos': 'Puntualidad'},
        'III': {'fortalezas': 'Lectura', 'dificultades': None, 'compromisos': ''},
    }
