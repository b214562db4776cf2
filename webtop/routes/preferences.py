from fastapi import APIRouter, Depends

from ..schemas.preferences import PreferencesModel, PreferencesUpdate
from ..services.shell import DesktopShell, get_shell
from ..utils.errors import api_error

router = APIRouter(prefix="/preferences")


@router.get("", response_model=PreferencesModel)
async def get_preferences(shell: DesktopShell = Depends(get_shell)):
    return PreferencesModel(**shell.preferences.current.to_dict())


@router.put("", response_model=PreferencesModel)
async def update_preferences(payload: PreferencesUpdate, shell: DesktopShell = Depends(get_shell)):
    try:
        prefs = await shell.preferences.update(payload.model_dump(exclude_none=True))
    except ValueError as exc:
        raise api_error(str(exc), code="invalid_preferences") from exc
    return PreferencesModel(**prefs.to_dict())


@router.delete("", response_model=PreferencesModel)
async def reset_preferences(shell: DesktopShell = Depends(get_shell)):
    prefs = await shell.preferences.reset()
    return PreferencesModel(**prefs.to_dict())
