from fastapi import APIRouter, Response

router = APIRouter(prefix="/api/audio", tags=["audio"])


@router.get("/{file_name}", status_code=204, response_class=Response)
async def get_audio(file_name: str):
	# No audio files are stored yet; clients fall back to speech synthesis
	return Response(status_code=204)
