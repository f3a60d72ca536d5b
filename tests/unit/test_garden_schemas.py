import pytest
from pydantic import ValidationError

from app.schemas import CreatePlantRequest, CredentialsRequest, UpdatePlantRequest
from conftest import make_plant


def test_create_request_accepts_camel_and_snake_case():
    camel = CreatePlantRequest.model_validate({"species": " Pilea ", "waterFrequencyDays": 4, "lightNeeds": "Bright"})
    snake = CreatePlantRequest.model_validate({"species": "Pilea", "water_frequency_days": 4, "light_needs": "Bright"})

    assert camel.species == "Pilea"
    assert camel.to_draft("ana@example.com") == snake.to_draft("ana@example.com")


def test_create_request_rejects_boolean_frequency():
    with pytest.raises(ValidationError):
        CreatePlantRequest.model_validate({"species": "Pilea", "waterFrequencyDays": True})


def test_update_request_changes_only_sent_fields():
    plant = make_plant(notes="keep me")

    updated = UpdatePlantRequest.model_validate({"waterFrequencyDays": 3, "species": None}).apply_to(plant)

    assert updated.water_frequency_days == 3
    assert updated.species == plant.species
    assert updated.notes == "keep me"
    assert updated.id == plant.id


def test_update_request_null_name_falls_back_to_species():
    updated = UpdatePlantRequest.model_validate({"name": None}).apply_to(make_plant())

    assert updated.name == ""
    assert updated.display_name == "Fiddle Leaf Fig"


def test_credentials_request():
    assert CredentialsRequest(email="ana@example.com", password="hunter22").email == "ana@example.com"
    with pytest.raises(ValidationError):
        CredentialsRequest(email="ana", password="hunter22")
