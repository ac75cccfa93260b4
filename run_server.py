"""
Start a local SparkLink API server with auto-reload.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting SparkLink Backend")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print("   - Health Check:  GET  http://localhost:8000/health")
    print("   - Public page:   GET  http://localhost:8000/public/{username}")
    print("   - API Docs:           http://localhost:8000/docs")
    print("   - ReDoc:              http://localhost:8000/redoc")
    print()
    print("Authentication:")
    print("   Owner endpoints require:")
    print("   Authorization: Bearer <supabase access token>")
    print()
    print("Test with curl:")
    print('   curl "http://localhost:8000/subscriptions/plans"')
    print('   curl -X POST "http://localhost:8000/gallery/upload" \\')
    print('     -H "Authorization: Bearer <token>" \\')
    print('     -F "title=Sunset" -F "image=@/path/to/photo.jpg"')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "sparklink.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
