# poultry_ledger/common/response.py

from fastapi.responses import JSONResponse


class SuccessResponse:
    @staticmethod
    def send(data=None, message="Success", status_code=200):
        response = {
            "success": True,
            "message": message,
            "data": data
        }
        return JSONResponse(status_code=status_code, content=response)

