from pathlib import Path
from typing import Iterator, List

import pytest
from sqlalchemy.orm import Session, sessionmaker

from scriptorium.corpus import AuthorRecord, Corpus, ParagraphRecord, SectionRecord, WorkRecord
from scriptorium.search.documents import SearchDocument
from scriptorium.search.extractor import extract_documents
from scriptorium.storage.database import get_engine, init_db, make_session_factory

BAHAULLAH = AuthorRecord(id=1, name="Bahá'u'lláh", slug="bahaullah")
ABDULBAHA = AuthorRecord(id=2, name="'Abdu'l-Bahá", slug="abdul-baha")


def make_corpus() -> Corpus:
    return Corpus(
        works=[
            WorkRecord(
                id=1,
                title="El Kitab-i-Iqan",
                slug="kitab-i-iqan",
                author=BAHAULLAH,
                description="El Libro de la Certeza",
            ),
            WorkRecord(
                id=2,
                title="Casa Universal de Justicia",
                slug="casa-universal",
                author=ABDULBAHA,
            ),
            WorkRecord(
                id=3,
                title="Borrador",
                slug="borrador",
                author=BAHAULLAH,
                is_public=False,
            ),
        ],
        sections=[
            SectionRecord(id=1, work_id=1, title="Primera parte"),
            SectionRecord(id=2, work_id=2, title="La revelación progresiva"),
            SectionRecord(id=3, work_id=99, title="Sección huérfana"),
        ],
        paragraphs=[
            ParagraphRecord(
                id=1,
                work_id=1,
                section_id=1,
                number=1,
                text="En el Nombre de Dios, el Misericordioso, el Compasivo.",
            ),
            ParagraphRecord(
                id=2,
                work_id=1,
                section_id=1,
                number=2,
                text="La naturaleza de la revelación divina ha ocupado las mentes de los buscadores de la verdad.",
            ),
            ParagraphRecord(
                id=3,
                work_id=2,
                section_id=2,
                number=1,
                text="Los escritos de Bahá'u'lláh establecen la justicia como principio.",
            ),
            ParagraphRecord(
                id=4,
                work_id=2,
                number=2,
                text="<p>La <b>unidad</b> de la humanidad &amp; la paz</p>",
            ),
            ParagraphRecord(id=5, work_id=3, number=1, text="Texto oculto sobre la justicia"),
            ParagraphRecord(id=6, work_id=99, number=1, text="Párrafo huérfano"),
            ParagraphRecord(id=7, work_id=1, number=3, text="Párrafo retirado", active=False),
        ],
    )


@pytest.fixture
def corpus() -> Corpus:
    return make_corpus()


@pytest.fixture
def documents(corpus: Corpus) -> List[SearchDocument]:
    return extract_documents(corpus)


@pytest.fixture
def session_factory(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    engine = get_engine(f"sqlite:///{tmp_path / 'scriptorium.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()
