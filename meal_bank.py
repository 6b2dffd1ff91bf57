# meal_bank.py
# Built-in meals. DEFAULT_MEALS seeds a fresh session; QUICK_ADD backs the "Quick add" chips.

DEFAULT_MEALS = [
    "Tacos",
    "Stir-fry",
    "Pasta",
    "Curry",
    "Pizza",
    "Burgers",
    "Roast chicken",
]

QUICK_ADD = [
    "Tacos",
    "Stir-fry",
    "Pasta",
    "Curry",
    "Pizza",
    "Burgers",
    "Salad",
    "Soup",
    "Sushi",
    "Roast chicken",
]
