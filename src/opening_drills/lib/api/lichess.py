import requests
import berserk
import logging
import json
from typing import Optional

logger = logging.getLogger("opening_drills")


class StudyManager:
    """Looks up Lichess Studies over the plain HTTP API."""
    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.headers = {'Authorization': f'Bearer {token}'} if token else {}
        self.base_url = "https://lichess.org/api"

    def find_study_by_name(self, username: str, study_name: str) -> Optional[str]:
        """
        Fetches user's studies and returns the ID of the one matching study_name.
        Lichess API returns NDJSON.
        """
        url = f"{self.base_url}/study/by/{username}"
        try:
            resp = requests.get(url, headers=self.headers, timeout=30)
            if resp.status_code == 200:
                for line in resp.iter_lines():
                    if line:
                        try:
                            study = json.loads(line)
                            if study.get('name') == study_name:
                                return study['id']
                        except json.JSONDecodeError:
                            continue
            else:
                logger.error(f"Failed to list studies: {resp.status_code} {resp.text}")
        except requests.RequestException as e:
            logger.error(f"Request error listing studies: {e}")
        return None


def get_lichess_client(token: Optional[str] = None) -> berserk.Client:
    """Creates a berserk client, authenticated when a token is given (private studies)."""
    if token:
        return berserk.Client(session=berserk.TokenSession(token))
    return berserk.Client()


def export_study_pgn(client: berserk.Client, study_id: str) -> str:
    """
    Downloads every chapter of a study as one multi-game PGN string.

    Returns an empty string if Lichess refuses the request.
    """
    try:
        chapters = list(client.studies.export(study_id))
    except (berserk.exceptions.ResponseError, berserk.exceptions.ApiError) as e:
        logger.error(f"Failed to export study {study_id}: {e}")
        return ""

    logger.info(f"Exported {len(chapters)} chapter(s) from study {study_id}.")
    return "\n\n".join(chapter.strip() for chapter in chapters)
