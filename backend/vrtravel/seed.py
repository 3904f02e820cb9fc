from __future__ import annotations

import logging

from vrtravel.config import ENABLE_DESTINATION_SEED
from vrtravel.indexes.travel_indexes import ensure_travel_indexes
from vrtravel.repositories.destination_repository import DestinationRepository
from vrtravel.schemas import DestinationIn
from vrtravel.services.admin_service import AdminService

logger = logging.getLogger(__name__)

# Starter catalogue; ids match the ones the web client links to.
SEED_DESTINATIONS = [
    (
        "d1",
        {
            "name": "Taj Mahal",
            "location": "Agra, Uttar Pradesh, India",
            "description": "An immense mausoleum of white marble, built in Agra between 1631 and 1648 by order of the Mughal emperor Shah Jahan in memory of his favourite wife.",
            "duration": "1 Day",
            "price": 5000,
            "rating": 4.8,
            "accommodation": "Luxury hotels available nearby",
            "inclusions": ["Entry tickets", "Guided tour", "Lunch"],
            "itinerary": [
                {"day": 1, "title": "Visit Taj Mahal", "description": "Explore the iconic Taj Mahal and learn about its history."},
            ],
        },
    ),
    (
        "d11",
        {
            "name": "Varanasi Ghats",
            "location": "Varanasi, Uttar Pradesh, India",
            "description": "Varanasi is a city on the banks of the Ganges, famous for its ghats and ancient temples.",
            "duration": "2 Days",
            "price": 4000,
            "rating": 4.4,
            "accommodation": "Guesthouse stay",
            "inclusions": ["Accommodation", "Ganga Aarti", "Boat ride"],
            "itinerary": [
                {"day": 1, "title": "Ganga Aarti", "description": "Witness the Ganga Aarti ceremony."},
                {"day": 2, "title": "Boat Ride", "description": "Enjoy a boat ride on the Ganges."},
            ],
        },
    ),
    (
        "d2",
        {
            "name": "Kerala Backwaters",
            "location": "Alleppey, Kerala, India",
            "description": "A network of lagoons, lakes and canals along the Malabar coast, best seen from a traditional houseboat.",
            "duration": "3 Days",
            "price": 12000,
            "rating": 4.7,
            "accommodation": "Houseboat stay",
            "inclusions": ["Houseboat", "All meals", "Village walk"],
            "itinerary": [
                {"day": 1, "title": "Board the houseboat", "description": "Cruise the backwaters of Alleppey."},
                {"day": 2, "title": "Village life", "description": "Visit coir-making villages along the canals."},
                {"day": 3, "title": "Kumarakom", "description": "Bird sanctuary visit before checkout."},
            ],
        },
    ),
]


async def seed_destinations(db) -> int:
    repo = DestinationRepository(db)
    if await repo.count() > 0:
        return 0

    for destination_id, data in SEED_DESTINATIONS:
        payload = DestinationIn.model_validate(data).model_dump()
        await repo.create(payload, destination_id=destination_id)
    logger.info("Seeded %d destinations", len(SEED_DESTINATIONS))
    return len(SEED_DESTINATIONS)


async def ensure_seed_data(db) -> None:
    await ensure_travel_indexes(db)

    entry = await AdminService(db).ensure_super_admin()
    logger.info("Protected admin entry ready for %s", entry.email)

    if ENABLE_DESTINATION_SEED:
        await seed_destinations(db)
