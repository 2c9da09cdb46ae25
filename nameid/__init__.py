from nameid.identifier import (
    FittedParameters,
    HumanNameIdentifier,
    HumanNameIdentifierModel,
    fit,
    identify_names,
)

__all__ = ["FittedParameters", "HumanNameIdentifier", "HumanNameIdentifierModel", "fit", "identify_names"]
