# Services package init
"""
SkateSpots Backend - Services Layer
=====================================

What:  Business logic between the routes (HTTP) and persistence.

Service Inventory:
    - SpotStore:      Store adapter over the `spots` table (one per request)
    - FileService:    Upload directory writes, URL → file resolution, cleanup
    - GeocodeService: Reverse-geocoding proxy to Nominatim
    - SpotService:    Create / add-image / lookup rules on top of the above
"""
