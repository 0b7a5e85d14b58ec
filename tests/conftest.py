"""Shared test fixtures."""

import json
import sys
from datetime import date
from pathlib import Path

import pytest

# Add src/ to path so tests can import goatherd
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from goatherd.data import AppConfig, HerdSnapshot  # noqa: E402

# All herd fixtures are evaluated as of this date
REFERENCE_DATE = date(2024, 6, 1)


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


@pytest.fixture
def config():
    """Herd configuration with a 30 kg / 10 month first service target."""
    return AppConfig(first_service_weight_kg=30.0)


@pytest.fixture
def sample_herd_data():
    """Herd snapshot in the exported store format (camelCase, Spanish values)."""
    return {
        "animals": [
            {
                "id": "D1",
                "name": "Canela",
                "sex": "Hembra",
                "birthDate": "2020-03-10",
                "lifecycleStage": "Cabra",
                "reproductiveStatus": "Vacía",
                "location": "Lote Ordeño",
                "status": "Activo",
            },
            {
                "id": "D2",
                "name": "Luna",
                "sex": "Hembra",
                "birthDate": "2021-02-01",
                "lifecycleStage": "Cabra",
                "reproductiveStatus": "Preñada",
                "location": "Potrero 2",
                "status": "Activo",
            },
            {
                "id": "K1",
                "sex": "Hembra",
                "birthDate": "2024-03-01",
                "birthWeight": 3.5,
                "lifecycleStage": "Cabrita",
                "motherId": "D2",
                "fatherId": "B1",
                "status": "Activo",
            },
            {
                "id": "K2",
                "sex": "Macho",
                "birthDate": "2024-03-25",
                "birthWeight": 3.2,
                "lifecycleStage": "Cabrito",
                "fatherId": "B1",
                "status": "Activo",
            },
            {
                "id": "Y1",
                "sex": "Hembra",
                "birthDate": "2023-08-01",
                "birthWeight": 3.4,
                "lifecycleStage": "Cabritona",
                "weaningDate": "2023-10-01",
                "weaningWeight": 15.0,
                "status": "Activo",
            },
            {
                "id": "B1",
                "sex": "Macho",
                "birthDate": "2022-01-01",
                "lifecycleStage": "Macho Cabrío",
                "status": "Activo",
            },
            {
                "id": "R1",
                "sex": "Macho",
                "birthDate": "N/A",
                "isReference": True,
                "status": "Activo",
            },
            {
                "id": "S1",
                "sex": "Hembra",
                "birthDate": "2024-01-10",
                "birthWeight": 3.0,
                "status": "Venta",
            },
        ],
        "parturitions": [
            {
                "id": "P1",
                "goatId": "D1",
                "parturitionDate": "2023-01-01",
                "parturitionOutcome": "Normal",
                "status": "finalizada",
                "dryingStartDate": "2023-06-01",
            },
            {
                "id": "P2",
                "goatId": "D1",
                "parturitionDate": "2023-08-15",
                "parturitionOutcome": "Normal",
                "status": "activa",
            },
            {
                "id": "P3",
                "goatId": "D2",
                "parturitionDate": "2024-03-01",
                "parturitionOutcome": "Con Mortinatos",
                "status": "activa",
            },
        ],
        "bodyWeighings": [
            {"id": "bw1", "animalId": "K1", "date": "2024-04-30", "kg": 12.0},
            {"id": "bw2", "animalId": "K1", "date": "2024-05-30", "kg": 15.0},
            {"id": "bw3", "animalId": "K2", "date": "2024-05-28", "kg": 15.5},
            {"id": "bw4", "animalId": "Y1", "date": "2023-10-30", "kg": 18.0},
            {"id": "bw5", "animalId": "Y1", "date": "2024-01-28", "kg": 25.0},
            {"id": "bw6", "animalId": "Y1", "date": "2024-04-27", "kg": 30.0},
            {"id": "bw7", "animalId": "S1", "date": "2024-03-10", "kg": 14.0},
        ],
        "weighings": [
            {"id": "mw1", "goatId": "D1", "date": "2023-03-01", "kg": 3.0},
            {"id": "mw2", "goatId": "D1", "date": "2023-04-01", "kg": 3.4},
            {"id": "mw3", "goatId": "D1", "date": "2023-09-15", "kg": 2.8},
            {"id": "mw4", "goatId": "D1", "date": "2023-10-15", "kg": 3.2},
            {"id": "mw5", "goatId": "D2", "date": "2024-03-15", "kg": 4.0},
            {"id": "mw6", "goatId": "D2", "date": "2024-04-10", "kg": 3.8},
            {"id": "mw7", "goatId": "D2", "date": "2024-05-01", "kg": 3.5},
            {"id": "mw8", "goatId": "D2", "date": "2024-05-25", "kg": 3.1},
        ],
        "events": [
            {"id": "e1", "animalId": "Y1", "date": "2024-05-01", "type": "Peso de Monta", "value": 30.0},
        ],
        "appConfig": {
            "pesoPrimerServicioKg": 30,
            "edadPrimerServicioMeses": 10,
            "diasMetaDesteteFinal": 60,
            "pesoMinimoDesteteFinal": 15,
            "diasToleranciaDestete": 10,
        },
    }


@pytest.fixture
def snapshot(sample_herd_data):
    return HerdSnapshot.from_dict(sample_herd_data)


@pytest.fixture
def snapshot_file(tmp_path, sample_herd_data):
    """Sample herd written to a snapshot JSON file."""
    path = tmp_path / "herd.json"
    path.write_text(json.dumps(sample_herd_data, ensure_ascii=False), encoding="utf-8")
    return path
