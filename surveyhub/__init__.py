"""SurveyHub: survey authoring and anonymous response collection."""

__version__ = "0.1.0"
