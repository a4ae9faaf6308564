"""Sample tables and query for trying the analyzer without any setup."""

from __future__ import annotations

from queryadvisor.registry import IndexRegistrySnapshot

DEMO_REGISTRY = IndexRegistrySnapshot.from_pairs([
    (
        "Customers",
        "CREATE CLUSTERED INDEX PK_Customers ON Customers(CustomerID);\n"
        "CREATE NONCLUSTERED INDEX IX_Customers_Name ON Customers(LastName, FirstName);",
    ),
    (
        "Orders",
        "CREATE CLUSTERED INDEX PK_Orders ON Orders(OrderID);\n"
        "CREATE NONCLUSTERED INDEX IX_Orders_CustomerID ON Orders(CustomerID) "
        "INCLUDE (OrderDate, TotalAmount);",
    ),
])

DEMO_QUERY = """SELECT c.CustomerID, c.FirstName, c.LastName, c.Email,
       o.OrderID, o.OrderDate, o.TotalAmount
FROM Customers c
INNER JOIN Orders o ON c.CustomerID = o.CustomerID
WHERE c.LastName LIKE 'Smith%'
ORDER BY o.OrderDate DESC;"""
