current_schema_version = 2000000;

schema = """
PRAGMA user_version = {};
""".format(current_schema_version) + """

-- A configured website. Rows for sites that are removed from the
-- configuration are deleted, taking their pages and lemmas with them.
CREATE TABLE dss_site(
  id integer primary key,
  url text not null unique,
  name text not null,
  status text not null default 'INDEXING' check (status IN ('INDEXING', 'INDEXED', 'FAILED')),
  status_time text not null default (strftime('%Y-%m-%d %H:%M:%f')),
  last_error text
);

-- A fetched page; content is the raw HTML.
CREATE TABLE dss_page(
  id integer primary key,
  site_id integer not null references dss_site(id) on delete cascade,
  path text not null,
  code integer not null,
  content text not null,
  unique (site_id, path)
);

-- frequency is the number of distinct pages of the site that have a
-- dss_index row for the lemma. Rows never sit at frequency 0.
CREATE TABLE dss_lemma(
  id integer primary key,
  site_id integer not null references dss_site(id) on delete cascade,
  lemma text not null,
  frequency integer not null default 0,
  unique (site_id, lemma)
);

-- rank is the number of occurrences of the lemma on the page.
CREATE TABLE dss_index(
  id integer primary key,
  page_id integer not null references dss_page(id) on delete cascade,
  lemma_id integer not null references dss_lemma(id) on delete cascade,
  rank real not null,
  unique (page_id, lemma_id)
);

CREATE INDEX idx_dss_lemma_lemma ON dss_lemma(lemma);
CREATE INDEX idx_dss_index_lemma_id ON dss_index(lemma_id);
"""
