# Routes package init
"""
Photo Gallery — API Routes Package
====================================

Route Inventory:
    - folders.py: GET  /api/folders          (list folders)
                  POST /api/folders          (create folder)
    - photos.py:  GET  /api/photos           (root listing, paginated)
                  GET  /api/photos/{folder}  (folder listing, paginated)
                  DELETE /api/photos?path=   (delete one photo)
    - upload.py:  POST /api/upload           (multipart upload)
    - system.py:  GET  /api/system, GET /health

Routes stay THIN: extract parameters, call a service, return its result.
"""
