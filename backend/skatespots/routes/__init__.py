# Routes package init
"""
SkateSpots Backend - API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - spots.py:    GET  /api/spots                       (list / search via ?q=)
                   GET  /api/spots/{id}                  (single spot)
                   POST /api/spots                       (create, 0..N images)
                   GET  /api/spots/{id}/image/{index}    (image file by position)
                   POST /api/spots/{id}/add-image        (append one image)
    - geocode.py:  GET  /api/reverse                     (lat/lon → city)
    - health.py:   GET  /api/test                        (liveness message)
                   GET  /health                          (database status)

Routes stay thin: read the request, call a service, pick the status code.
Errors are raised, not returned; main.py's handlers format them.
"""
