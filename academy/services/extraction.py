"""Text extraction for uploaded training material.

PDFs go through an asynchronous Textract job first (it handles scanned
documents). If the job cannot be started, ends in a non-success status, or
does not finish within the configured number of polls, the raw bytes are
downloaded and parsed locally with pypdf. Office documents are parsed
locally; anything else is read as plain text.
"""

import time
from io import BytesIO

import boto3
import docx
import openpyxl
import pptx
from flask import current_app
from pypdf import PdfReader

from . import storage
from .errors import ExtractionError

COMPREHEND_MAX_CHARS = 4500

OFFICE_EXTENSIONS = ('docx', 'pptx', 'xlsx')


def textract_client():
    return boto3.client('textract', region_name=current_app.config.get('AWS_REGION'))


def comprehend_client():
    return boto3.client('comprehend', region_name=current_app.config.get('AWS_REGION'))


def _extension(key):
    return key.rsplit('.', 1)[-1].lower() if '.' in key else ''


def _line_text(blocks):
    return [b['Text'] for b in blocks or [] if b.get('BlockType') == 'LINE' and b.get('Text')]


def extract_with_textract(bucket, key) -> str:
    client = textract_client()
    started = client.start_document_text_detection(
        DocumentLocation={'S3Object': {'Bucket': bucket, 'Name': key}}
    )
    job_id = started.get('JobId')
    if not job_id:
        raise ExtractionError('Textract did not return a job id')

    interval = current_app.config.get('TEXTRACT_POLL_INTERVAL', 2)
    max_polls = current_app.config.get('TEXTRACT_MAX_POLLS', 150)

    for attempt in range(1, max_polls + 1):
        time.sleep(interval)
        resp = client.get_document_text_detection(JobId=job_id)
        status = resp.get('JobStatus') or 'FAILED'
        if status == 'IN_PROGRESS':
            current_app.logger.debug('Textract job %s in progress (poll %d/%d)', job_id, attempt, max_polls)
            continue
        if status != 'SUCCEEDED':
            raise ExtractionError(f'Textract job failed with status: {status}')

        # results are paged; keep job order
        pages = ['\n'.join(_line_text(resp.get('Blocks')))]
        next_token = resp.get('NextToken')
        while next_token:
            resp = client.get_document_text_detection(JobId=job_id, NextToken=next_token)
            pages.append('\n'.join(_line_text(resp.get('Blocks'))))
            next_token = resp.get('NextToken')
        return '\n'.join(pages)

    raise ExtractionError(f'Textract job {job_id} did not finish after {max_polls} polls')


def parse_pdf_bytes(data: bytes) -> str:
    reader = PdfReader(BytesIO(data))
    texts = []
    for page in reader.pages:
        t = page.extract_text()
        if t:
            texts.append(t.strip())
    return '\n'.join(texts)


def extract_with_pdf_parser(bucket, key) -> str:
    return parse_pdf_bytes(storage.download_bytes(bucket, key))


def extract_text_from_pdf(bucket, key) -> str:
    try:
        current_app.logger.info('Attempting Textract extraction for %s', key)
        text = extract_with_textract(bucket, key)
        current_app.logger.info('Textract extraction succeeded for %s', key)
        return text
    except Exception as textract_error:
        current_app.logger.warning('Textract extraction failed for %s: %s; falling back to pypdf', key, textract_error)
        try:
            text = extract_with_pdf_parser(bucket, key)
            current_app.logger.info('pypdf extraction succeeded for %s', key)
            return text
        except Exception as parser_error:
            current_app.logger.error('Both Textract and pypdf failed for %s', key)
            raise ExtractionError(
                f'Failed to extract text from PDF: Textract error: {textract_error}; '
                f'pdf parser error: {parser_error}'
            ) from parser_error


def _docx_text(data: bytes) -> str:
    doc = docx.Document(BytesIO(data))
    return '\n'.join(p.text.strip() for p in doc.paragraphs if p.text.strip())


def _pptx_text(data: bytes) -> str:
    prs = pptx.Presentation(BytesIO(data))
    slides = []
    for i, slide in enumerate(prs.slides, start=1):
        texts = []
        for shape in slide.shapes:
            if hasattr(shape, 'text'):
                t = shape.text.strip()
                if t:
                    texts.append(t)
        if texts:
            slides.append(f"Slide {i}:\n" + '\n'.join(texts))
    return '\n\n'.join(slides)


def _xlsx_text(data: bytes) -> str:
    wb = openpyxl.load_workbook(filename=BytesIO(data), read_only=True, data_only=True)
    rows = []
    for sheet in wb.worksheets:
        for r in sheet.iter_rows(values_only=True):
            cells = [str(c) for c in r if c is not None]
            if cells:
                rows.append('\t'.join(cells))
    return '\n'.join(rows)


_OFFICE_PARSERS = {'docx': _docx_text, 'pptx': _pptx_text, 'xlsx': _xlsx_text}


def extract_text(bucket, key) -> str:
    ext = _extension(key)
    if ext == 'pdf':
        return extract_text_from_pdf(bucket, key)
    if ext in OFFICE_EXTENSIONS:
        data = storage.download_bytes(bucket, key)
        try:
            return _OFFICE_PARSERS[ext](data)
        except Exception as e:
            raise ExtractionError(f'Failed to extract text from {ext} document {key}: {e}') from e
    return storage.read_text(bucket, key)


def _comprehend_input(text):
    # Comprehend rejects documents over 5000 bytes
    return (text or '')[:COMPREHEND_MAX_CHARS]


def key_phrases(text: str) -> list:
    resp = comprehend_client().detect_key_phrases(Text=_comprehend_input(text), LanguageCode='en')
    return resp.get('KeyPhrases', [])


def analyze_text(text: str) -> dict:
    """Key phrases and entities for the first part of the text."""
    truncated = _comprehend_input(text)
    entities = comprehend_client().detect_entities(Text=truncated, LanguageCode='en')
    return {
        'key_phrases': key_phrases(truncated),
        'entities': entities.get('Entities', []),
    }


def primary_skill(text: str):
    if not (text or '').strip():
        return None
    phrases = key_phrases(text)
    if not phrases:
        return None
    best = max(phrases, key=lambda p: p.get('Score', 0))
    return (best.get('Text') or '').strip()[:120] or None
