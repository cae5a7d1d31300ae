"""Fixed place-name gazetteer and category taxonomy used by extraction."""

from __future__ import annotations

PLACES: tuple[str, ...] = (
    # India
    "New Delhi",
    "Delhi",
    "Mumbai",
    "Bengaluru",
    "Bangalore",
    "Chennai",
    "Kolkata",
    "Hyderabad",
    "Pune",
    "Ahmedabad",
    "Jaipur",
    "Lucknow",
    "Kanpur",
    "Nagpur",
    "Indore",
    "Bhopal",
    "Patna",
    "Chandigarh",
    "Srinagar",
    "Guwahati",
    "Thiruvananthapuram",
    "Kochi",
    "Coimbatore",
    "Visakhapatnam",
    "Bhubaneswar",
    "Ranchi",
    "Dehradun",
    "Shimla",
    "Goa",
    "Noida",
    "Gurugram",
    "Varanasi",
    "Amritsar",
    "Surat",
    # South Asia and the region
    "Islamabad",
    "Karachi",
    "Lahore",
    "Dhaka",
    "Kathmandu",
    "Colombo",
    "Kabul",
    "Beijing",
    "Shanghai",
    "Hong Kong",
    "Tokyo",
    "Seoul",
    "Singapore",
    "Bangkok",
    "Jakarta",
    "Manila",
    "Kuala Lumpur",
    "Dubai",
    "Abu Dhabi",
    "Riyadh",
    "Doha",
    "Tehran",
    "Jerusalem",
    "Tel Aviv",
    "Gaza",
    "Beirut",
    "Ankara",
    "Istanbul",
    # Europe
    "London",
    "Paris",
    "Berlin",
    "Brussels",
    "Geneva",
    "Madrid",
    "Rome",
    "Moscow",
    "Kyiv",
    "Warsaw",
    "Vienna",
    "Amsterdam",
    "Stockholm",
    "Dublin",
    # Americas
    "Washington",
    "New York",
    "Los Angeles",
    "San Francisco",
    "Chicago",
    "Houston",
    "Seattle",
    "Boston",
    "Toronto",
    "Ottawa",
    "Mexico City",
    "Sao Paulo",
    "Buenos Aires",
    # Africa and Oceania
    "Cairo",
    "Nairobi",
    "Lagos",
    "Johannesburg",
    "Cape Town",
    "Sydney",
    "Melbourne",
    "Auckland",
)

TAXONOMY: tuple[str, ...] = (
    "politics",
    "business",
    "economy",
    "markets",
    "money",
    "technology",
    "tech",
    "science",
    "health",
    "sports",
    "sport",
    "cricket",
    "entertainment",
    "movies",
    "lifestyle",
    "education",
    "environment",
    "travel",
    "world",
    "india",
    "national",
    "nation",
    "local",
    "cities",
    "opinion",
    "auto",
    "crime",
)
