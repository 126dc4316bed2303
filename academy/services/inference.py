"""Thin wrappers around the hosted text-generation APIs.

Bedrock (Converse API through boto3) is the default provider. Setting
LLM_PROVIDER=openai calls the OpenAI Responses HTTP API directly with
`requests`, retrying rate limits and 5xx responses with backoff.
"""

import random
import time

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from .errors import GenerationError

OPENAI_RESPONSES_URL = 'https://api.openai.com/v1/responses'


def bedrock_client():
    return boto3.client('bedrock-runtime', region_name=current_app.config.get('AWS_REGION'))


def _converse(prompt: str, max_tokens: int, temperature: float) -> str:
    model_id = current_app.config.get('BEDROCK_MODEL_ID')
    try:
        resp = bedrock_client().converse(
            modelId=model_id,
            messages=[{'role': 'user', 'content': [{'text': prompt}]}],
            inferenceConfig={'maxTokens': max_tokens, 'temperature': temperature},
        )
    except (BotoCoreError, ClientError) as e:
        raise GenerationError(f'Bedrock converse failed for {model_id}: {e}') from e

    try:
        content = resp['output']['message']['content']
    except (KeyError, TypeError):
        content = []
    return '\n'.join(c['text'] for c in content if isinstance(c, dict) and c.get('text'))


def _responses_text(jr) -> str:
    # extract text from known shapes
    text = jr.get('output_text') or ''
    if text:
        return text
    parts = []
    for item in jr.get('output') or []:
        if isinstance(item, dict):
            for c in item.get('content', []):
                if isinstance(c, dict) and 'text' in c:
                    parts.append(c['text'])
                elif isinstance(c, str):
                    parts.append(c)
        elif isinstance(item, str):
            parts.append(item)
    return '\n'.join(parts)


def _openai_responses(prompt: str, max_tokens: int, temperature: float) -> str:
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key:
        raise GenerationError('OPENAI_API_KEY is not configured')

    headers = {'Authorization': f'Bearer {api_key}', 'Content-Type': 'application/json'}
    body = {
        'model': current_app.config.get('OPENAI_MODEL', 'gpt-4o-mini'),
        'input': prompt,
        'max_output_tokens': max_tokens,
        'temperature': temperature,
    }

    max_attempts = current_app.config.get('OPENAI_MAX_ATTEMPTS', 4)
    backoff = 1.0
    last_error = None
    for attempt in range(1, max_attempts + 1):
        try:
            r = requests.post(OPENAI_RESPONSES_URL, headers=headers, json=body, timeout=30)
        except requests.exceptions.RequestException as e:
            last_error = e
            current_app.logger.warning('OpenAI network error, attempt %d/%d: %s', attempt, max_attempts, e)
        else:
            if r.status_code == 429 and 'insufficient_quota' in (r.text or ''):
                raise GenerationError('OpenAI quota exhausted')
            if r.status_code == 429 or 500 <= r.status_code < 600:
                last_error = f'HTTP {r.status_code}'
                ra = r.headers.get('Retry-After')
                try:
                    wait = float(ra) if ra else backoff
                except ValueError:
                    wait = backoff
                current_app.logger.warning('OpenAI returned %s, attempt %d/%d, retrying in %.1fs',
                                           r.status_code, attempt, max_attempts, wait)
                if attempt < max_attempts:
                    time.sleep(wait + random.uniform(0, 0.5))
                backoff *= 2
                continue
            if r.status_code >= 400:
                raise GenerationError(f'OpenAI HTTP error {r.status_code}: {(r.text or "")[:500]}')
            return _responses_text(r.json())

        if attempt < max_attempts:
            time.sleep(backoff + random.uniform(0, 0.5))
        backoff *= 2

    raise GenerationError(f'OpenAI request failed after {max_attempts} attempts: {last_error}')


def invoke_model(prompt: str, max_tokens: int, temperature: float) -> str:
    """Send one prompt and return the raw text of the reply."""
    provider = (current_app.config.get('LLM_PROVIDER') or 'bedrock').lower()
    if provider == 'openai':
        text = _openai_responses(prompt, max_tokens, temperature)
    elif provider == 'bedrock':
        text = _converse(prompt, max_tokens, temperature)
    else:
        raise GenerationError(f'unknown LLM_PROVIDER {provider!r}')
    current_app.logger.debug('model reply (%s): %s', provider, text[:500])
    return text
