"""
Emissions core router collecting the path operations of all router modules
"""

from fastapi import APIRouter


router = APIRouter()
