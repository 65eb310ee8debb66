"""
Data Transformation Module
"""
from .cleaners import CleaningStats, DataCleaner, clean_dataframe
from .enrichers import DataEnricher, enrich_visit_data
from .transformers import PipelineResult, ReportingPipeline, ReportParameters, ReportView

__all__ = [
    "CleaningStats",
    "DataCleaner",
    "clean_dataframe",
    "DataEnricher",
    "enrich_visit_data",
    "PipelineResult",
    "ReportingPipeline",
    "ReportParameters",
    "ReportView",
]
