# Reference data - comparables catalog, demo scenarios and the seeded queue
