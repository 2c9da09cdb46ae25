import sys
from pathlib import Path

import pytest

# Add the parent directory to path to import nameid
sys.path.insert(0, str(Path(__file__).parent.parent))

from nameid.config import NameIdentifierConfig
from nameid.dictionaries import clear_cache, read_gender_dictionary, read_name_dictionary

NAMES = ["alice", "bob", "carol", "dave", "jordan", "taylor", "smith", "jones"]

GENDER_ROWS = [
    "name,years.appearing,count.male,count.female,prob.gender,obs.male,est.male,upper,lower",
    "Alice,100,10,9000,Female,0.001,0.001,0.01,0.0",
    "Bob,100,9000,10,Male,0.999,0.999,1.0,0.99",
    "Carol,100,12,8000,Female,0.002,0.002,0.01,0.0",
    "Dave,100,7000,3,Male,0.998,0.998,1.0,0.99",
    "Jordan,80,700,300,Unknown,0.7,0.7,0.8,0.6",
    "Taylor,80,300,700,Unknown,0.3,0.3,0.4,0.2",
]


@pytest.fixture
def dictionary_files(tmp_path):
    names_file = tmp_path / "names.txt"
    names_file.write_text("\n".join(NAMES) + "\n", encoding="utf-8")
    gender_file = tmp_path / "gender.csv"
    gender_file.write_text("\n".join(GENDER_ROWS) + "\n", encoding="utf-8")
    return names_file, gender_file


@pytest.fixture
def name_dictionary(dictionary_files):
    return read_name_dictionary(dictionary_files[0])


@pytest.fixture
def gender_dictionary(dictionary_files):
    return read_gender_dictionary(dictionary_files[1])


@pytest.fixture
def config(dictionary_files):
    return NameIdentifierConfig.create_default().with_dictionaries(*dictionary_files)


@pytest.fixture(autouse=True)
def fresh_dictionary_cache():
    clear_cache()
    yield
    clear_cache()
