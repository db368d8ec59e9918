from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from frontdesk.api.dependencies import get_email_correction_workflow
from frontdesk.core.exceptions import NotFoundError, PreconditionError
from frontdesk.core.logger import logger
from frontdesk.services.email_correction import EmailCorrectionRequest, EmailCorrectionWorkflow

router = APIRouter()


@router.post("/update-email")
async def update_email(
    req: EmailCorrectionRequest,
    workflow: EmailCorrectionWorkflow = Depends(get_email_correction_workflow),
):
    try:
        result = await workflow.correct_email(req)
    except PreconditionError as e:
        return JSONResponse(status_code=400, content={"success": False, "message": str(e)})
    except NotFoundError as e:
        return JSONResponse(status_code=404, content={"success": False, "message": str(e)})
    except Exception as e:
        logger.exception(f"❌ Error updating email: {e}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Server error. Please try again."})

    return {
        "success": True,
        "message": "Email confirmed successfully",
        "booking": {"date": result.date, "time": result.time, "name": result.name},
    }
