# Cloud Functions for Firebase: foot measurement endpoints.
# Deploy with `firebase deploy`

from firebase_functions import https_fn, options
import json
import logging
import math
import os
import sys
import tempfile
import requests

from foot_measurements import bindings

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_SEC = 30

CORS = options.CorsOptions(
    cors_origins=["*"],
    cors_methods=["get", "post"],
)


def error_response(message: str, status: int = 400) -> https_fn.Response:
    return https_fn.Response(
        response=json.dumps({"status": "error", "message": message}),
        status=status,
        content_type="application/json",
    )


def parse_request(req: https_fn.Request, needs_qr_size: bool = True):
    """
    Read {"link": <image url>, "qr_size_cm": <float>} from the request body.

    Raises:
        ValueError: Body is not a JSON object, or a field is missing or invalid.

    Returns:
        tuple: (link, qr_size_cm) - qr_size_cm is None when not needed.
    """
    body_json = json.loads(req.get_data().decode('utf-8').strip())
    if not isinstance(body_json, dict):
        raise ValueError("Request body must be a JSON object")
    link = body_json.get("link")
    if not link or not isinstance(link, str):
        raise ValueError("No image link provided")
    qr_size_cm = None
    if needs_qr_size:
        try:
            qr_size_cm = float(body_json.get("qr_size_cm", 0))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid qr_size_cm: {body_json.get('qr_size_cm')!r}")
        if not math.isfinite(qr_size_cm) or qr_size_cm <= 0:
            raise ValueError("qr_size_cm must be positive")
    return link, qr_size_cm



def download_image(link: str, folder: str) -> str:
    """Download the photograph into folder and return its path."""
    image = requests.get(link, timeout=DOWNLOAD_TIMEOUT_SEC)
    image.raise_for_status()
    path = os.path.join(folder, "foot_image")
    with open(path, "wb") as f:
        f.write(image.content)
    return path


def png_response(buffer: bindings.OwnedBuffer, failure_message: str) -> https_fn.Response:
    """Copy an owned PNG buffer into the response and release it."""
    if buffer.is_null:
        return error_response(failure_message, status=422)
    body = bytes(buffer.data)
    bindings.release(buffer)
    return https_fn.Response(response=body, status=200, content_type="image/png")


def measurements_response(vector) -> https_fn.Response:
    """JSON body for a measurement vector; an all-zero vector is a failure."""
    if not any(vector):
        return error_response("Could not measure the foot in this image", status=422)
    body = {
        "status": "success",
        "measurements": vector,
        "length_cm": vector[0],
        "width_cm": vector[1],
        "heel_to_arch_cm": vector[2],
        "arch_to_toe_cm": vector[3],
        "big_toe_length_cm": vector[4],
        "is_calibrated": bool(vector[5]),
    }
    return https_fn.Response(response=json.dumps(body), status=200, content_type="application/json")


@https_fn.on_request(cors=CORS, memory=options.MemoryOption.GB_1)
def measure_foot(req: https_fn.Request) -> https_fn.Response:
    try:
        link, qr_size_cm = parse_request(req)
        with tempfile.TemporaryDirectory() as folder:
            path = download_image(link, folder)
            buffer = bindings.measure_foot(path, qr_size_cm)
        return png_response(buffer, "Could not measure the foot in this image")
    except (ValueError, requests.RequestException) as e:
        logger.warning("measure_foot rejected request: %s", e)
        return error_response(f"Error processing request: {str(e)}")


@https_fn.on_request(cors=CORS, memory=options.MemoryOption.GB_1)
def extract_foot_measurements(req: https_fn.Request) -> https_fn.Response:
    try:
        link, qr_size_cm = parse_request(req)
        with tempfile.TemporaryDirectory() as folder:
            path = download_image(link, folder)
            vector = bindings.extract_measurements(path, qr_size_cm)
        return measurements_response(vector)
    except (ValueError, requests.RequestException) as e:
        logger.warning("extract_foot_measurements rejected request: %s", e)
        return error_response(f"Error processing request: {str(e)}")


@https_fn.on_request(cors=CORS)
def detect_foot_edges(req: https_fn.Request) -> https_fn.Response:
    try:
        link, _ = parse_request(req, needs_qr_size=False)
        with tempfile.TemporaryDirectory() as folder:
            path = download_image(link, folder)
            buffer = bindings.edge_detect(path)
        return png_response(buffer, "Could not detect edges in this image")
    except (ValueError, requests.RequestException) as e:
        logger.warning("detect_foot_edges rejected request: %s", e)
        return error_response(f"Error processing request: {str(e)}")


@https_fn.on_request(cors=CORS)
def remove_foot_background(req: https_fn.Request) -> https_fn.Response:
    try:
        link, _ = parse_request(req, needs_qr_size=False)
        with tempfile.TemporaryDirectory() as folder:
            path = download_image(link, folder)
            buffer = bindings.remove_background(path)
        return png_response(buffer, "Could not find a foot in this image")
    except (ValueError, requests.RequestException) as e:
        logger.warning("remove_foot_background rejected request: %s", e)
        return error_response(f"Error processing request: {str(e)}")


@https_fn.on_request()
def python_version_foot_measurements(req: https_fn.Request) -> https_fn.Response:
    response_data = {
        "message": "Foot measurements service",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    }
    return https_fn.Response(json.dumps(response_data), content_type="application/json")
