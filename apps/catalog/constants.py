DEFAULT_CATEGORIES = [
    'Cultural',
    'Adventure',
    'Historical',
    'Culinary',
    'Beach',
    'Ski',
    'Eco',
    'Religious',
    'Shopping',
    'Wellness',
    'Photography',
    'Weekend',
    'International',
    'Domestic',
]

MAX_SEATS_PER_BUS = 100
