# ============ TABLE DEFINITIONS (column lists, wrapped by CREATE TABLE) ============
# DuckDB ignores VARCHAR(n) widths; the CHECKs enforce them.

MAPPING = """
  tld           VARCHAR(15),
  description   VARCHAR(200) NOT NULL,
  PRIMARY KEY (tld),
  CHECK (length(tld) <= 15),
  CHECK (length(description) <= 200)
"""

# staging: tld2 is '' (never NULL) for single-part TLDs
URL_TEMP = """
  pos           INTEGER,
  domain_name   VARCHAR(50),
  tld1          VARCHAR(15) NOT NULL,
  tld2          VARCHAR(15),
  CHECK (length(domain_name) <= 50),
  CHECK (length(tld1) <= 15),
  CHECK (length(tld2) <= 15)
"""

TLD = """
  tld_id        INTEGER,
  tld1          VARCHAR(15) NOT NULL,
  tld2          VARCHAR(15),
  PRIMARY KEY (tld_id),
  CHECK (length(tld1) <= 15),
  CHECK (length(tld2) <= 15)
"""

DOMAIN = """
  domain_name   VARCHAR(50),
  PRIMARY KEY (domain_name),
  CHECK (length(domain_name) <= 50)
"""

URL = """
  domain_name   VARCHAR(50) NOT NULL,
  tld_id        INTEGER     NOT NULL,
  position      INTEGER     NOT NULL,
  PRIMARY KEY (domain_name, tld_id),
  FOREIGN KEY (domain_name) REFERENCES domain (domain_name),
  FOREIGN KEY (tld_id) REFERENCES tld (tld_id),
  UNIQUE (position),
  CHECK (position >= 1 AND position <= 10000),
  CHECK (length(domain_name) <= 50)
"""

# ============ LOAD STATEMENTS ============

INSERT_MAPPING = """
INSERT INTO mapping (tld, description)
VALUES (?, ?)
ON CONFLICT DO NOTHING;
"""

# dense rank by best (minimum) position; tld1, tld2 break ties
INSERT_TLD = """
INSERT INTO tld (tld_id, tld1, tld2)
  SELECT row_number() OVER (ORDER BY min(pos), tld1, tld2), tld1, tld2
  FROM url_temp
  GROUP BY tld1, tld2
ON CONFLICT DO NOTHING;
"""

INSERT_DOMAIN = """
INSERT INTO domain (domain_name)
  SELECT domain_name
  FROM url_temp
  GROUP BY domain_name
  ORDER BY domain_name
ON CONFLICT DO NOTHING;
"""

# first staged row wins per (domain_name, tld_id): the url key is conflict-ignored
SELECT_RESOLVED_URLS = """
SELECT s.pos, s.domain_name, t.tld_id
FROM url_temp s
JOIN tld t
  ON t.tld1 = s.tld1
 AND t.tld2 = s.tld2
QUALIFY row_number() OVER (PARTITION BY s.domain_name, t.tld_id ORDER BY s.pos) = 1
ORDER BY s.pos;
"""

# position clashes, range and foreign-key violations must fail the batch
INSERT_URL = """
INSERT INTO url (position, domain_name, tld_id)
VALUES (?, ?, ?);
"""

# ============ VIEW DEFINITIONS (wrapped by CREATE VIEW ... AS) ============

TOP_10_URLS = """
SELECT u.position, u.domain_name, t.tld1, t.tld2
FROM url u
JOIN tld t ON t.tld_id = u.tld_id
ORDER BY u.position
LIMIT 10
"""

# effective TLD: tld2 when present, else tld1; inner join drops unmapped TLDs
TOP_10_TLDS = """
SELECT min(u.position) AS best_position, t.tld1, t.tld2, m.description
FROM url u
JOIN tld t ON t.tld_id = u.tld_id
JOIN mapping m
  ON m.tld = CASE WHEN t.tld2 = '' THEN t.tld1 ELSE t.tld2 END
GROUP BY t.tld1, t.tld2, m.description
ORDER BY best_position
LIMIT 10
"""

TOP_10_REPEATED_DOMAINS = """
SELECT min(position) AS best_position, domain_name
FROM url
GROUP BY domain_name
HAVING count(*) > 1
ORDER BY best_position
LIMIT 10
"""
