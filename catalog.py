from typing import List, Optional

from schemas import CatalogItem


CATEGORIES = ["All", "Breakfast", "Meals", "Snacks", "Beverages"]


# ------------ Menu -------------
MENU_ITEMS = [
    {
        "id": 1,
        "name": "Masala Dosa",
        "price": 45,
        "category": "Breakfast",
        "description": "Crispy dosa with potato masala",
        "image": "https://myfoodstory.com/wp-content/uploads/2025/08/Mysore-Masala-Dosa-Recipe-3-500x375.jpg",
        "rating": 4.5,
        "popular": True,
    },
    {
        "id": 2,
        "name": "Idli Sambar",
        "price": 35,
        "category": "Breakfast",
        "description": "Steamed rice cakes with sambar",
        "image": "https://www.shutterstock.com/image-photo/traditional-breakfast-south-india-idly-260nw-2460311521.jpg",
        "rating": 4.3,
    },
    {
        "id": 3,
        "name": "Vada Sambar",
        "price": 30,
        "category": "Breakfast",
        "description": "Crispy vada with hot sambar",
        "image": "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcSVMFV57HoBznF7uj4vR-ZBeWp5PSDT7XxrAw&s",
        "rating": 4.2,
    },
    {
        "id": 4,
        "name": "Coffee",
        "price": 15,
        "category": "Beverages",
        "description": "Hot filter coffee",
        "image": "https://images.unsplash.com/photo-1509042239860-f550ce710b93?w=400&h=300&fit=crop",
        "rating": 4.7,
        "popular": True,
    },
    {
        "id": 5,
        "name": "Tea",
        "price": 10,
        "category": "Beverages",
        "description": "Fresh Indian masala tea",
        "image": "https://www.munatycooking.com/wp-content/uploads/2024/04/Three-glasses-filled-with-karak-chai.jpg",
        "rating": 4.4,
    },
    {
        "id": 6,
        "name": "Vegetable Biryani",
        "price": 120,
        "category": "Meals",
        "description": "Aromatic rice with mixed vegetables",
        "image": "https://images.unsplash.com/photo-1563379091339-03b21ab4a4f8?w=400&h=300&fit=crop",
        "rating": 4.6,
        "popular": True,
    },
    {
        "id": 7,
        "name": "Paneer Butter Masala",
        "price": 140,
        "category": "Meals",
        "description": "Paneer in rich tomato gravy",
        "image": "https://images.unsplash.com/photo-1631452180519-c014fe946bc7?w=400&h=300&fit=crop",
        "rating": 4.8,
    },
    {
        "id": 8,
        "name": "Fried Rice",
        "price": 80,
        "category": "Meals",
        "description": "Chinese style fried rice",
        "image": "https://images.unsplash.com/photo-1603133872878-684f208fb84b?w=400&h=300&fit=crop",
        "rating": 4.1,
    },
    {
        "id": 9,
        "name": "Veg Sandwich",
        "price": 50,
        "category": "Snacks",
        "description": "Grilled sandwich with veggies",
        "image": "https://images.unsplash.com/photo-1528735602780-2552fd46c7af?w=400&h=300&fit=crop",
        "rating": 4.3,
    },
    {
        "id": 10,
        "name": "Samosa",
        "price": 20,
        "category": "Snacks",
        "description": "Crispy samosa with chutney",
        "image": "https://images.unsplash.com/photo-1601050690597-df0568f70950?w=400&h=300&fit=crop",
        "rating": 4.5,
    },
]

_ITEMS = tuple(CatalogItem(**m) for m in MENU_ITEMS)
_BY_ID = {item.id: item for item in _ITEMS}


def list_items() -> List[CatalogItem]:
    return list(_ITEMS)


def get_item(item_id: int) -> Optional[CatalogItem]:
    return _BY_ID.get(item_id)


def filter_items(search_term: str = "", category: str = "All") -> List[CatalogItem]:
    """Items whose name contains ``search_term`` (any case) within ``category``."""
    term = (search_term or "").lower()
    return [
        item
        for item in _ITEMS
        if term in item.name.lower() and (category == "All" or item.category == category)
    ]
