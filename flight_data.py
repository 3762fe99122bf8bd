"""
flight_data.py

Static flight catalog, fixed search results, add-on prices and the cabin seat
layout. Everything in here is read-only reference data.
"""

from typing import List, Optional

AIRPORTS = {
    "DEL": ("Indira Gandhi International (DEL)", "Delhi"),
    "BOM": ("Chhatrapati Shivaji Maharaj International (BOM)", "Mumbai"),
    "BLR": ("Kempegowda International (BLR)", "Bangalore"),
    "DXB": ("Dubai International (DXB)", "Dubai"),
    "SIN": ("Singapore Changi (SIN)", "Singapore"),
    "DOH": ("Hamad International (DOH)", "Doha"),
    "FRA": ("Frankfurt Airport (FRA)", "Frankfurt"),
    "LHR": ("London Heathrow (LHR)", "London"),
}


def _endpoint(code: str, date: str, terminal: str, gate: str) -> dict:
    airport, city = AIRPORTS[code]
    return {
        "airport": airport,
        "city": city,
        "date": date,
        "terminal": terminal,
        "gate": gate,
    }


def _flight(
    flight_id: str,
    flight_number: str,
    airline: str,
    aircraft: str,
    times: tuple,
    duration: str,
    price: int,
    stops: int,
    ai_score: int,
    price_change: int,
    status: str,
    departure: dict,
    arrival: dict,
    baggage: str,
    delay: Optional[str] = None,
) -> dict:
    return {
        "id": flight_id,
        "flightNumber": flight_number,
        "airline": airline,
        "aircraft": aircraft,
        "from": departure["city"],
        "to": arrival["city"],
        "departure": times[0],
        "arrival": times[1],
        "duration": duration,
        "price": price,
        "stops": stops,
        "aiScore": ai_score,
        "priceChange": price_change,
        "status": status,
        "departureDetails": departure,
        "arrivalDetails": arrival,
        "baggage": baggage,
        "delay": delay,
    }


# Prices in INR, priceChange in percent.
FLIGHT_DATABASE: List[dict] = [
    _flight("1", "6E-2045", "IndiGo", "Airbus A320neo", ("06:00 AM", "08:15 AM"), "2h 15m",
            4850, 0, 95, -12, "On Time",
            _endpoint("DEL", "Dec 15, 2025", "Terminal 3", "D21"),
            _endpoint("BOM", "Dec 15, 2025", "Terminal 2", "A15"), "Carousel 4"),
    _flight("2", "AI-864", "Air India", "Boeing 787-8", ("09:30 AM", "11:45 AM"), "2h 15m",
            5200, 0, 88, 8, "Boarding",
            _endpoint("DEL", "Dec 16, 2025", "Terminal 3", "C18"),
            _endpoint("BOM", "Dec 16, 2025", "Terminal 2", "B22"), "Carousel 2"),
    _flight("3", "UK-955", "Vistara", "Airbus A321neo", ("01:00 PM", "03:20 PM"), "2h 20m",
            6100, 0, 92, -18, "On Time",
            _endpoint("DEL", "Dec 17, 2025", "Terminal 3", "E12"),
            _endpoint("BOM", "Dec 17, 2025", "Terminal 2", "C08"), "Carousel 1"),
    _flight("4", "SG-8194", "SpiceJet", "Boeing 737-800", ("04:15 PM", "06:30 PM"), "2h 15m",
            4350, 0, 85, -22, "On Time",
            _endpoint("DEL", "Dec 18, 2025", "Terminal 3", "D35"),
            _endpoint("BOM", "Dec 18, 2025", "Terminal 1", "A20"), "Carousel 6"),
    _flight("5", "EK-512", "Emirates", "Boeing 777-300ER", ("03:30 AM", "05:45 AM"), "3h 15m",
            18500, 0, 98, -28, "On Time",
            _endpoint("BOM", "Dec 19, 2025", "Terminal 2", "B08"),
            _endpoint("DXB", "Dec 19, 2025", "Terminal 3", "B16"), "Carousel 12"),
    _flight("6", "SQ-406", "Singapore Airlines", "Airbus A350-900", ("11:00 PM", "07:30 AM"), "5h 30m",
            24500, 0, 96, 5, "On Time",
            _endpoint("BLR", "Dec 20, 2025", "Terminal 1", "D22"),
            _endpoint("SIN", "Dec 21, 2025", "Terminal 3", "A18"), "Carousel 8"),
    _flight("7", "QP-1303", "Akasa Air", "Boeing 737 MAX 8", ("07:45 AM", "10:00 AM"), "2h 15m",
            4650, 0, 90, -15, "On Time",
            _endpoint("DEL", "Dec 22, 2025", "Terminal 3", "D18"),
            _endpoint("BOM", "Dec 22, 2025", "Terminal 1", "A12"), "Carousel 5"),
    _flight("8", "QR-572", "Qatar Airways", "Airbus A350-1000", ("02:15 AM", "04:30 AM"), "4h 15m",
            22000, 0, 97, -25, "On Time",
            _endpoint("DEL", "Dec 23, 2025", "Terminal 3", "F15"),
            _endpoint("DOH", "Dec 23, 2025", "Terminal 1", "D05"), "Carousel 15"),
    _flight("9", "LH-761", "Lufthansa", "Airbus A380-800", ("01:20 AM", "07:45 AM"), "8h 25m",
            35000, 0, 94, 10, "Delayed",
            _endpoint("DEL", "Dec 24, 2025", "Terminal 3", "G05"),
            _endpoint("FRA", "Dec 24, 2025", "Terminal 1", "Z69"), "Carousel 20", delay="45 min"),
    _flight("10", "BA-142", "British Airways", "Boeing 787-9 Dreamliner", ("02:30 AM", "08:15 AM"), "9h 45m",
            38500, 0, 93, 12, "On Time",
            _endpoint("DEL", "Dec 25, 2025", "Terminal 3", "G18"),
            _endpoint("LHR", "Dec 25, 2025", "Terminal 5", "B12"), "Carousel 7"),
    _flight("11", "SG-8945", "SpiceJet", "Boeing 737-800", ("06:45 PM", "09:00 PM"), "2h 15m",
            4200, 0, 84, -20, "On Time",
            _endpoint("DEL", "Dec 26, 2025", "Terminal 3", "D42"),
            _endpoint("BOM", "Dec 26, 2025", "Terminal 1", "A28"), "Carousel 3"),
    _flight("12", "AI-658", "Air India", "Airbus A320", ("05:30 PM", "07:50 PM"), "2h 20m",
            5500, 1, 82, 6, "On Time",
            _endpoint("DEL", "Dec 27, 2025", "Terminal 3", "C25"),
            _endpoint("BOM", "Dec 27, 2025", "Terminal 2", "B18"), "Carousel 9"),
]


def get_flight(flight_id: str) -> Optional[dict]:
    return next((f for f in FLIGHT_DATABASE if f["id"] == str(flight_id)), None)


def search_catalog(origin: Optional[str] = None, destination: Optional[str] = None) -> List[dict]:
    """Case-insensitive city match; a missing endpoint matches everything."""
    results = []
    for flight in FLIGHT_DATABASE:
        if origin and flight["from"].lower() != origin.strip().lower():
            continue
        if destination and flight["to"].lower() != destination.strip().lower():
            continue
        results.append(flight)
    return results


# /flights/search answers with these two whatever the query.
FIXED_SEARCH_RESULTS: List[dict] = [
    {
        "id": "1",
        "airline": "Delta Airlines",
        "flightNumber": "DL 123",
        "from": "New York",
        "to": "London",
        "departure": "08:30 AM",
        "arrival": "08:45 PM",
        "duration": "7h 15m",
        "price": 489,
        "stops": 0,
        "aiScore": 95,
        "priceChange": -12,
    },
    {
        "id": "2",
        "airline": "United Airlines",
        "flightNumber": "UA 456",
        "from": "New York",
        "to": "London",
        "departure": "11:00 AM",
        "arrival": "11:30 PM",
        "duration": "7h 30m",
        "price": 525,
        "stops": 0,
        "aiScore": 88,
        "priceChange": 5,
    },
]


ADD_ON_PRICES = {
    "insurance": 2075,
    "extraBaggage": 4150,
    "seatSelection": 2490,
}

#
# Seat map
#

CABIN_LAYOUT = {
    "Business": {"rows": range(1, 6), "labels": ["A", "B", "C", "D"]},
    "Premium Economy": {"rows": range(6, 12), "labels": list("ABCDEF")},
    "Economy": {"rows": range(12, 31), "labels": list("ABCDEF")},
}

OCCUPIED_SEATS = frozenset([
    "1A", "1C", "2B", "2D", "3A", "4C", "5B",
    "6B", "7C", "7F", "8A", "8E", "9D", "10B", "10F", "11C",
    "12A", "12F", "13B", "13E", "14C", "14D", "15A", "15F",
    "16B", "16E", "17C", "18A", "18D", "18F", "19B", "19E",
    "20A", "20C", "20F", "21D", "21E", "22B", "22C", "23A", "23F",
    "24B", "24D", "24E", "25C", "25F", "26A", "26D", "27B", "27E",
    "28C", "28F", "29A", "29D", "30B", "30E",
])
PREMIUM_SEATS = frozenset(["1A", "1B", "1C", "1D", "1E", "1F", "12A", "12B", "12C", "12D", "12E", "12F"])
EXIT_ROW_SEATS = frozenset(["12A", "12B", "12C", "12D", "12E", "12F", "13A", "13B", "13C", "13D", "13E", "13F"])


def seat_status(seat_number: str) -> str:
    if seat_number in OCCUPIED_SEATS:
        return "occupied"
    if seat_number in EXIT_ROW_SEATS:
        return "exit"
    if seat_number in PREMIUM_SEATS:
        return "premium"
    return "available"


def generate_seat_layout(fare_class: str) -> List[dict]:
    """Seats of one cabin; unknown fare classes fall back to Economy."""
    cabin = fare_class if fare_class in CABIN_LAYOUT else "Economy"
    cfg = CABIN_LAYOUT[cabin]
    layout = []
    for row in cfg["rows"]:
        for label in cfg["labels"]:
            seat_number = f"{row}{label}"
            layout.append(
                {
                    "seat_number": seat_number,
                    "row": row,
                    "cabin_class": cabin,
                    "status": seat_status(seat_number),
                }
            )
    return layout
