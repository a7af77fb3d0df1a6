"""
Destinations loaded into an empty ``destinations`` table on startup
"""

from typing import Any, Dict, List

SEED_DESTINATIONS: List[Dict[str, Any]] = [
    {
        "name": "Goa",
        "country": "India",
        "description": "Famous beach destination with golden sands, vibrant nightlife, Portuguese architecture, and water sports.",
        "image_url": "https://images.unsplash.com/photo-1512343879784-a960bf40e7f2?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Nov-Feb",
        "avg_temperature": "29°C (84°F)",
        "beach_season": "Oct-Mar",
        "rainy_season": "June to September",
    },
    {
        "name": "Kerala",
        "country": "India",
        "description": "Serene backwaters, lush green landscapes, Ayurvedic treatments, and rich culture.",
        "image_url": "https://images.unsplash.com/photo-1602216056096-3b40cc0c9944?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Sep-Mar",
        "avg_temperature": "28°C (82°F)",
        "beach_season": "Oct-Feb",
        "rainy_season": "June to August",
    },
    {
        "name": "Rajasthan",
        "country": "India",
        "description": "Land of kings with majestic forts, colorful festivals, and vast desert landscapes.",
        "image_url": "https://images.unsplash.com/photo-1599661046827-9a64ae016537?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Mar",
        "avg_temperature": "25°C (77°F)",
        "beach_season": "N/A",
        "rainy_season": "July to September",
    },
    {
        "name": "Hampi",
        "country": "India",
        "description": "UNESCO World Heritage site with ancient ruins, magnificent temples, and boulder-strewn landscapes.",
        "image_url": "https://images.unsplash.com/photo-1571536802807-30aa00c0e864?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Feb",
        "avg_temperature": "27°C (81°F)",
        "beach_season": "N/A",
        "rainy_season": "June to September",
    },
    {
        "name": "Pondicherry",
        "country": "India",
        "description": "Former French colony with colonial architecture, peaceful beaches, and a spiritual ambiance.",
        "image_url": "https://images.unsplash.com/photo-1582810803949-3e40d51e1c2f?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Mar",
        "avg_temperature": "30°C (86°F)",
        "beach_season": "Nov-Feb",
        "rainy_season": "October to December",
    },
    {
        "name": "Gokarna",
        "country": "India",
        "description": "Coastal town with pristine beaches, temple trails, and a laid-back vibe.",
        "image_url": "https://images.unsplash.com/photo-1623853476319-21c484f856fb?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Mar",
        "avg_temperature": "28°C (82°F)",
        "beach_season": "Nov-Feb",
        "rainy_season": "June to September",
    },
    {
        "name": "Kanyakumari",
        "country": "India",
        "description": "India's southernmost tip where three seas meet, with spectacular sunrises and sunsets.",
        "image_url": "https://images.unsplash.com/photo-1624867903645-809450dc647c?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Feb",
        "avg_temperature": "30°C (86°F)",
        "beach_season": "Nov-Feb",
        "rainy_season": "June to September",
    },
    {
        "name": "Varanasi",
        "country": "India",
        "description": "One of the world's oldest living cities, with sacred ghats and ancient temples.",
        "image_url": "https://images.unsplash.com/photo-1561361058-c24cecda1510?auto=format&fit=crop&w=600&q=80",
        "best_time_to_visit": "Oct-Mar",
        "avg_temperature": "25°C (77°F)",
        "beach_season": "N/A",
        "rainy_season": "July to September",
    },
]
