"""
mock_document_converter.py — Mock Implementation of the Document Converter (REST API)

This module provides a simulated HTML-to-PDF converter for local runs of the invoice service.
It exposes a simple FastAPI application that accepts invoice HTML and returns a small PDF.

Simulation Scenarios:
    • Successful conversion (minimal single-page PDF that embeds the HTML size)
    • Conversion failure (HTTP 422) for an empty body
    • Timeout simulation, triggered by the marker "<!-- converter:timeout -->"

Endpoints:
    POST /v1/convert/html — Converts the text/html request body.

Port:
    Default: 8002 (HTTP)
"""

import logging
import time

from fastapi import FastAPI, HTTPException, Request, Response

app = FastAPI(title="Mock Document Converter")
logging.basicConfig(level=logging.INFO)

TIMEOUT_MARKER = "<!-- converter:timeout -->"


def build_minimal_pdf(text: str) -> bytes:
    """
    Builds a syntactically valid one-page PDF that shows a single line of text.

    Args:
        text (str): ASCII text to place on the page.

    Returns:
        bytes: The PDF document.
    """
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    pdf = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode()
    for offset in offsets:
        pdf += f"{offset:010d} 00000 n \n".encode()
    pdf += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(pdf)


@app.post("/v1/convert/html")
async def convert_html(request: Request):
    """
    Converts the posted HTML into a PDF.

    Returns:
        Response: application/pdf body.

    Raises:
        HTTPException(422): If the request body is empty.
    """
    html = (await request.body()).decode("utf-8", errors="replace")
    logging.info(f"[CONVERTER] Conversion request received ({len(html)} characters).")

    if not html.strip():
        logging.warning("[CONVERTER] Empty document rejected.")
        raise HTTPException(status_code=422, detail={"errorCode": "empty_document"})

    if TIMEOUT_MARKER in html:
        logging.info("[CONVERTER] Simulating timeout...")
        time.sleep(35)

    pdf = build_minimal_pdf(f"Mock invoice rendering, {len(html)} characters of HTML")
    return Response(content=pdf, media_type="application/pdf")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)
