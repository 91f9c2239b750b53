# Overview: Fixture rows written to each collection the first time it is read.

"""
Seed fixtures, in the persisted (camelCase JSON) row layout.

INITIAL_USERS carries plaintext passwords; the user repository hashes them
before they are written, so no plaintext credential ever reaches the store.
All passwords default to: "password". Change them after first login.
"""

INITIAL_USERS = [
    {"id": "1", "name": "Admin User", "email": "admin@nexus.com", "username": "admin", "password": "password", "role": "ADMIN", "isActive": True},
    {"id": "2", "name": "Juan Vendedor", "email": "juan@nexus.com", "username": "juan", "password": "password", "role": "SELLER", "isActive": True},
    {"id": "3", "name": "Maria Almacen", "email": "maria@nexus.com", "username": "maria", "password": "password", "role": "WAREHOUSE", "isActive": True},
]

INITIAL_CLIENTS = [
    {"id": "cf", "name": "Consumidor Final", "taxId": "00000000", "email": "N/A", "phone": "N/A", "address": "N/A", "totalSpent": 0},
    {"id": "c1", "name": "Corporación Alpha", "taxId": "12345678-9", "email": "contacto@alpha.com", "phone": "555-0101", "address": "Av. Industrial 123", "totalSpent": 1500},
    {"id": "c2", "name": "Juan Pérez", "taxId": "98765432-1", "email": "juan.perez@email.com", "phone": "555-0202", "address": "Calle Falsa 456", "totalSpent": 450},
]

INITIAL_PRODUCTS = [
    {"id": "p1", "code": "PROD-001", "name": 'Laptop Pro 15"', "description": "High performance laptop", "price": 1200, "cost": 800, "stock": 15, "minStock": 5, "categoryId": "tech"},
    {"id": "p2", "code": "PROD-002", "name": 'Monitor 4K 27"', "description": "Ultra HD Monitor", "price": 350, "cost": 220, "stock": 8, "minStock": 10, "categoryId": "tech"},
    {"id": "p3", "code": "PROD-003", "name": "Teclado Mecánico", "description": "RGB Mechanical Keyboard", "price": 80, "cost": 45, "stock": 45, "minStock": 15, "categoryId": "peripherals"},
    {"id": "p4", "code": "PROD-004", "name": "Mouse Gamer", "description": "Precision mouse", "price": 50, "cost": 25, "stock": 3, "minStock": 10, "categoryId": "peripherals"},
]

INITIAL_PROVIDERS = [
    {"id": "pr1", "name": "TechSupply Inc", "contactName": "Robert Smith", "email": "sales@techsupply.com", "phone": "555-9000", "category": "Technology"},
    {"id": "pr2", "name": "Global Logistics", "contactName": "Elena G.", "email": "logistics@global.com", "phone": "555-8000", "category": "Services"},
]
