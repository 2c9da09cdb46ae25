import os
from pathlib import Path

PROJECT_ROOT_PATH = os.path.abspath(os.path.join(__file__, os.pardir, os.pardir))
RESOURCES_PATH = Path(__file__).resolve().parent / "resources"

# Name and gender data follow the layout of https://github.com/MWYang/InternationalNames,
# which in turn sources https://github.com/OpenGenderTracking/globalnamedata
DEFAULT_NAME_DICTIONARY_PATH = RESOURCES_PATH / "names.txt"
DEFAULT_GENDER_DICTIONARY_PATH = RESOURCES_PATH / "gender_dictionary.csv"
GENDER_PROBABILITY_COLUMN = 6  # est.male

DEFAULT_THRESHOLD = 0.50

# Guard-check limits
MAX_NUM_TOKENS = 10
MIN_CHAR_LENGTH = 3
MIN_GUARD_FRACTION = 0.75
MIN_STDDEV = 0.05
MIN_NUM_UNIQUE = 10
STDDEV_BYPASS_COUNT = 10
UNIQUE_BYPASS_COUNT = 100

# 2**12 registers gives ~1.6% standard error
DEFAULT_HLL_BITS = 12
MIN_HLL_BITS = 4
MAX_HLL_BITS = 18

DEFAULT_N_JOBS = 1
DEFAULT_CHUNK_SIZE = 10000

MALE_PROBABILITY_CUTOFF = 0.5


class GenderStrings:
    MALE = "Male"
    FEMALE = "Female"
    NA = "NA"


class BooleanStrings:
    TRUE = "true"
    FALSE = "false"


class Keys:
    IS_NAME_INDICATOR = "isNameIndicator"
    ORIGINAL_NAME = "originalName"
    GENDER = "gender"


class MetadataKeys:
    TREAT_AS_NAME = "treatAsName"
    PREDICTED_NAME_PROBABILITY = "predictedNameProbability"
    BEST_STRATEGY = "bestStrategy"
