"""Persistence — MongoClient, RfpRepository."""

from rfp_analyzer.persistence.mongo_client import MongoClient
from rfp_analyzer.persistence.rfp_repository import RfpRepository

__all__ = ["MongoClient", "RfpRepository"]
