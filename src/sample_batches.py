from __future__ import annotations

from typing import Any, Dict, List

_SPECIES = "Pacific White Shrimp (Litopenaeus vannamei)"
_FACILITY = "Hawaii Breeding Facility"

# Demo genealogy as shown on the batch genealogy screen.
# Several child ids (BST-2024-003 .. 006) have no record of their own;
# they are dangling on purpose.
SAMPLE_BATCHES: List[Dict[str, Any]] = [
    {
        "id": "BST-2023-001",
        "species": _SPECIES,
        "generation": 1,
        "birthDate": "2023-01-15",
        "origin": "Foundation Stock - Hawaii",
        "parents": [],
        "children": ["BST-2023-087", "BST-2023-089"],
        "quantity": 200,
        "healthStatus": "excellent",
        "breedingValue": 98,
        "geneticMarkers": {
            "WSSV_Resistance": "AA",
            "Growth_Rate": "AB",
            "Disease_Tolerance": "BB",
            "Feed_Efficiency": "AA",
        },
        "location": "Broodstock Tank A-01",
        "notes": "Exceptional foundation stock with superior genetic traits",
    },
    {
        "id": "BST-2023-002",
        "species": _SPECIES,
        "generation": 1,
        "birthDate": "2023-02-01",
        "origin": "Foundation Stock - Ecuador",
        "parents": [],
        "children": ["BST-2023-087", "BST-2023-089", "BST-2023-091"],
        "quantity": 180,
        "healthStatus": "excellent",
        "breedingValue": 95,
        "geneticMarkers": {
            "WSSV_Resistance": "AB",
            "Growth_Rate": "BB",
            "Disease_Tolerance": "AA",
            "Feed_Efficiency": "AB",
        },
        "location": "Broodstock Tank A-02",
        "notes": "High-performance breeding line with superior disease resistance",
    },
    {
        "id": "BST-2023-087",
        "species": _SPECIES,
        "generation": 2,
        "birthDate": "2023-06-15",
        "origin": _FACILITY,
        "parents": ["BST-2023-001", "BST-2023-002"],
        "children": ["BST-2024-001", "BST-2024-003", "BST-2024-005"],
        "quantity": 1500,
        "healthStatus": "excellent",
        "breedingValue": 96,
        "geneticMarkers": {
            "WSSV_Resistance": "AB",
            "Growth_Rate": "AB",
            "Disease_Tolerance": "AB",
            "Feed_Efficiency": "AA",
        },
        "location": "Breeding Tank B-15",
        "notes": "F2 generation showing excellent hybrid vigor and balanced traits",
    },
    {
        "id": "BST-2023-089",
        "species": _SPECIES,
        "generation": 2,
        "birthDate": "2023-07-01",
        "origin": _FACILITY,
        "parents": ["BST-2023-001", "BST-2023-002"],
        "children": ["BST-2024-001", "BST-2024-002", "BST-2024-004"],
        "quantity": 1200,
        "healthStatus": "good",
        "breedingValue": 93,
        "geneticMarkers": {
            "WSSV_Resistance": "AA",
            "Growth_Rate": "BB",
            "Disease_Tolerance": "AB",
            "Feed_Efficiency": "AB",
        },
        "location": "Breeding Tank B-16",
        "notes": "Selected for breeding program continuation with focus on disease resistance",
    },
    {
        "id": "BST-2023-091",
        "species": _SPECIES,
        "generation": 2,
        "birthDate": "2023-07-20",
        "origin": _FACILITY,
        "parents": ["BST-2023-002"],
        "children": ["BST-2024-006"],
        "quantity": 800,
        "healthStatus": "good",
        "breedingValue": 88,
        "geneticMarkers": {
            "WSSV_Resistance": "AB",
            "Growth_Rate": "AA",
            "Disease_Tolerance": "BB",
            "Feed_Efficiency": "BB",
        },
        "location": "Breeding Tank B-17",
        "notes": "Specialized line for rapid growth characteristics",
    },
    {
        "id": "BST-2024-001",
        "species": _SPECIES,
        "generation": 3,
        "birthDate": "2024-01-15",
        "origin": _FACILITY,
        "parents": ["BST-2023-087", "BST-2023-089"],
        "children": [],
        "quantity": 5000,
        "healthStatus": "excellent",
        "breedingValue": 94,
        "geneticMarkers": {
            "WSSV_Resistance": "AB",
            "Growth_Rate": "AB",
            "Disease_Tolerance": "AB",
            "Feed_Efficiency": "AA",
        },
        "location": "Tank A-15, Building 3",
        "notes": "F3 generation with optimal commercial characteristics and balanced genetics",
    },
    {
        "id": "BST-2024-002",
        "species": _SPECIES,
        "generation": 3,
        "birthDate": "2024-02-20",
        "origin": _FACILITY,
        "parents": ["BST-2023-089"],
        "children": [],
        "quantity": 3200,
        "healthStatus": "good",
        "breedingValue": 89,
        "geneticMarkers": {
            "WSSV_Resistance": "AA",
            "Growth_Rate": "AB",
            "Disease_Tolerance": "BB",
            "Feed_Efficiency": "AB",
        },
        "location": "Tank B-08, Building 2",
        "notes": "Selected for international export markets with strong disease resistance",
    },
]

DEFAULT_ROOT_ID = "BST-2023-001"


def sample_records() -> List[Dict[str, Any]]:
    """
    Fresh copies of the demo records (callers may mutate them).
    """
    return [dict(r) for r in SAMPLE_BATCHES]
