from fastapi import APIRouter, Request

router = APIRouter()


@router.get('/api/packages')
def list_packages(request: Request):
    """List the packages a session can be opened for."""
    packages = request.app.state.registry.packages()
    return {"packages": [p.to_dict() for p in packages.values()], "count": len(packages)}
