"""Pytest configuration and fixtures for EDM Liveset tests."""

import pytest
from bs4 import BeautifulSoup

from edmlive.dataclasses import EdmLiveConfig, PageResult, TrackSummary
from edmlive.parsers import EdmLiveParser

BASE_URL = "https://www.edmliveset.com"


def make_listing_html(start: int, count: int, total: int, page_size: int) -> str:
    """Listing grid page holding items ``start`` .. ``start + count - 1``."""
    items = ''.join(
        f'''
        <div class="ue_post_grid_item">
            <div class="uc_post_image">
                <a class="uc_post_grid_style_one_image" href="/liveset-{i}/">
                    <img src="https://www.edmliveset.com/wp-content/uploads/{i}.jpg">
                </a>
            </div>
            <div class="uc_post_title"><a href="/liveset-{i}/">DJ {i} b2b Guest {i} - Live @ Club {i}</a></div>
        </div>
        '''
        for i in range(start, start + count)
    )
    query_data = f"{{&quot;total_posts&quot;:{total},&quot;count_posts&quot;:{page_size}}}"
    return f'''
    <html>
    <body>
        <div class="uc_post_grid_style_one" querydata="{query_data}">
            {items}
        </div>
    </body>
    </html>
    '''


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'lxml')


def summary(index: int) -> TrackSummary:
    return TrackSummary(
        id=f"edmlive:/liveset-{index}",
        title=f"DJ {index} - Live",
        url=f"{BASE_URL}/liveset-{index}/",
        image=None,
        artists=[f"DJ {index}"],
    )


class FakeSource:
    """Page-numbered source of ``total`` items served ``page_size`` at a time."""

    def __init__(self, total: int, page_size: int, exact: bool = True, max_pages_total: bool = False):
        self.items = [summary(i) for i in range(total)]
        self.total = total
        self.page_size = page_size
        self.exact = exact
        self.max_pages_total = max_pages_total
        self.requested_pages = []

    async def fetch_page(self, page: int) -> PageResult:
        self.requested_pages.append(page)
        start = (page - 1) * self.page_size
        chunk = self.items[start:start + self.page_size]
        if self.exact:
            return PageResult(items=chunk, page_size=self.page_size, total=self.total, page_size_exact=True)

        # Search layout: page size is whatever was parsed, total is max pages times that.
        # Only pages before the last one are known to be full.
        observed = len(chunk)
        max_pages = -(-self.total // self.page_size)
        return PageResult(items=chunk, page_size=observed, total=max_pages * observed,
                          page_size_exact=bool(chunk) and page < max_pages)


@pytest.fixture
def config():
    """Configuration with retries and rate limiting disabled."""
    return EdmLiveConfig(
        max_retries=0,
        retry_delay=0.0,
        min_request_interval=0.0,
    )


@pytest.fixture
def parser(config):
    return EdmLiveParser(config)


@pytest.fixture
def sample_listing_html():
    """Listing grid page with two valid items and one malformed item."""
    return '''
    <html>
    <body>
        <div class="uc_post_grid_style_one"
             querydata="{&quot;total_posts&quot;:&quot;137&quot;,&quot;count_posts&quot;:12,&quot;orderby&quot;:&quot;date&quot;}">
            <div class="ue_post_grid_item">
                <div class="uc_post_image">
                    <a class="uc_post_grid_style_one_image" href="/artbat-b2b-anyma-live-tomorrowland-2024/">
                        <img src="https://www.edmliveset.com/wp-content/uploads/artbat.jpg">
                    </a>
                </div>
                <div class="uc_post_title">
                    <a href="/artbat-b2b-anyma-live-tomorrowland-2024/">Artbat b2b Anyma - Live @ Tomorrowland 2024</a>
                </div>
            </div>
            <div class="ue_post_grid_item">
                <div class="uc_post_image">
                    <a class="uc_post_grid_style_one_image" href="https://www.edmliveset.com/charlotte-de-witte-awakenings/">
                        <img data-src="https://www.edmliveset.com/wp-content/uploads/cdw.jpg">
                    </a>
                </div>
                <div class="uc_post_title">Charlotte de Witte [BE], Enrico Sangiuliano – Awakenings Festival</div>
            </div>
            <div class="ue_post_grid_item">
                <div class="uc_post_image"></div>
            </div>
        </div>
    </body>
    </html>
    '''


@pytest.fixture
def sample_search_html():
    """Search results page with a load-more anchor."""
    return '''
    <html>
    <body>
        <div class="elementor-posts-container">
            <article class="elementor-post">
                <a class="elementor-post__thumbnail__link" href="/amelie-lens-live-at-awakenings-2023/">
                    <div class="elementor-post__thumbnail"><img src="https://www.edmliveset.com/wp-content/uploads/lens.jpg"></div>
                </a>
                <h3 class="elementor-post__title"><a href="/amelie-lens-live-at-awakenings-2023/">Amelie Lens - Live at Awakenings 2023</a></h3>
                <div class="elementor-post__meta-data"><span class="elementor-post-date">21/03/2024</span></div>
            </article>
            <article class="elementor-post">
                <h3 class="elementor-post__title"><a href="/adam-beyer-vs-cirez-d-drumcode/">Adam Beyer vs Cirez D - Drumcode Festival</a></h3>
                <div class="elementor-post__meta-data"><span class="elementor-post-date">March 5, 2024</span></div>
            </article>
            <article class="elementor-post">
                <div class="elementor-post__text"><p>No link or title here</p></div>
            </article>
        </div>
        <div class="e-load-more-anchor" data-page="1" data-max-page="4" data-next-page="https://www.edmliveset.com/page/2/?s=live"></div>
    </body>
    </html>
    '''


@pytest.fixture
def sample_detail_html():
    """Track page with a full info list, audio player and timestamped tracklist."""
    return '''
    <html>
    <body>
        <div class="elementor-widget-theme-post-featured-image">
            <img src="https://www.edmliveset.com/wp-content/uploads/artbat-header.jpg">
        </div>
        <h1 class="elementor-heading-title">Artbat b2b Anyma - Live @ Tomorrowland 2024</h1>
        <ul class="elementor-post-info">
            <li class="elementor-icon-list-item">
                <span class="elementor-icon-list-text elementor-post-info__item">
                    <span class="elementor-post-info__item-prefix">Artist:</span>
                    <a href="/tag/artbat/">Artbat</a>, <a href="/tag/anyma/">Anyma</a>
                </span>
            </li>
            <li class="elementor-icon-list-item">
                <span class="elementor-icon-list-text elementor-post-info__item">
                    <span class="elementor-post-info__item-prefix">Genre:</span>
                    <a href="/genre/melodic-techno/">Melodic Techno</a>
                    <a href="/genre/techno/">Techno</a>
                </span>
            </li>
            <li class="elementor-icon-list-item">
                <span class="elementor-icon-list-text elementor-post-info__item">
                    <span class="elementor-post-info__item-prefix">Event:</span> Tomorrowland 2024
                </span>
            </li>
            <li class="elementor-icon-list-item">
                <span class="elementor-icon-list-text elementor-post-info__item">
                    <span class="elementor-post-info__item-prefix">Added:</span> 21/07/2024
                </span>
            </li>
        </ul>
        <div class="elementor-widget-theme-post-content">
            <p>Tracklist:</p>
            <p>[00:00] Artbat - Intro</p>
            <p>[29:45] Anyma - Eternity</p>
            <p>[1:02:03] Artbat &amp; Anyma - Outro</p>
            <audio controls><source src="/wp-content/uploads/artbat-anyma-tml24.mp3" type="audio/mpeg"></audio>
        </div>
    </body>
    </html>
    '''


@pytest.fixture
def sparse_detail_html():
    """Track page with no info list, no audio player and no timestamps."""
    return '''
    <html>
    <body>
        <div class="entry-title">Reinier Zonneveld ft. Roland Kaiser – Live @ Mysteryland</div>
        <div class="elementor-widget-theme-post-content">
            <p>Listen on <a href="https://hearthis.at/edmliveset/reinier-zonneveld/listen/">hearthis</a></p>
        </div>
    </body>
    </html>
    '''


@pytest.fixture
def listing_page_html():
    """Factory building listing grid pages."""
    return make_listing_html


@pytest.fixture
def fake_source():
    """Factory building fake page-numbered sources."""
    return FakeSource


@pytest.fixture
def make_soup():
    return soup
