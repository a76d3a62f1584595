import pytest

from demonlist.core.demons import validate_level_id, validate_requirement
from demonlist.errors import InvalidLevelId, InvalidRequirement


@pytest.mark.parametrize("requirement", [0, 1, 50, 100])
def test_valid_requirements(requirement):
    validate_requirement(requirement)


@pytest.mark.parametrize("requirement", [-1, 101, 1000])
def test_invalid_requirements(requirement):
    with pytest.raises(InvalidRequirement):
        validate_requirement(requirement)


def test_level_id_must_be_positive():
    assert validate_level_id(1) == 1
    assert validate_level_id(2 ** 40) == 2 ** 40
    with pytest.raises(InvalidLevelId):
        validate_level_id(0)
    with pytest.raises(InvalidLevelId):
        validate_level_id(-5)
