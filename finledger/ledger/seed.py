"""Seed ledger installed the first time no persisted ledger exists."""

SEED_TRANSACTIONS = (
    {
        "id": "1",
        "userId": "1",
        "amount": 50000,
        "type": "income",
        "category": "Salary",
        "description": "Monthly salary",
        "date": "2023-04-01T10:00:00Z",
    },
    {
        "id": "2",
        "userId": "1",
        "amount": 5000,
        "type": "expense",
        "category": "Food",
        "description": "Grocery shopping",
        "date": "2023-04-05T15:30:00Z",
    },
    {
        "id": "3",
        "userId": "2",
        "amount": 25000,
        "type": "income",
        "category": "Freelance",
        "description": "Website development",
        "date": "2023-04-10T09:15:00Z",
    },
    {
        "id": "4",
        "userId": "2",
        "amount": 2500,
        "type": "expense",
        "category": "Transport",
        "description": "Fuel",
        "date": "2023-04-12T18:20:00Z",
    },
    {
        "id": "5",
        "userId": "2",
        "amount": 1800,
        "type": "expense",
        "category": "Entertainment",
        "description": "Movie and dinner",
        "date": "2023-04-15T20:00:00Z",
    },
    {
        "id": "6",
        "userId": "1",
        "amount": 10000,
        "type": "expense",
        "category": "Rent",
        "description": "Monthly rent",
        "date": "2023-04-02T11:00:00Z",
    },
)
